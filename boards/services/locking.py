"""
Per-board serialization for writes that touch a board's check-in set.

Every insert or delete of a check-in, together with the aggregate recompute
that follows it, runs inside one transaction holding a row lock on the
board. Lock waits, deadlocks and session-number collisions are treated as
conflicts and the whole unit is retried a bounded number of times, with a
growing, jittered pause between attempts.
"""

import logging
import random
import time
from typing import Callable, Optional, TypeVar

from django.db import IntegrityError, OperationalError, transaction

from ..conf import get_setting
from ..exceptions import ConcurrentUpdateConflict, NotFoundError
from ..models import Board, CheckIn

logger = logging.getLogger(__name__)

T = TypeVar('T')

TRANSIENT_MARKERS = ('lock', 'deadlock', 'serializ', 'could not obtain')

# A racing same-day insert shows up as a unique violation on the session
# constraint. PostgreSQL and MySQL name the constraint, SQLite lists columns.
SESSION_CONFLICT_MARKERS = (
    CheckIn.SESSION_CONSTRAINT,
    f'{CheckIn._meta.db_table}.session_number',
)


def is_transient(exc: Exception) -> bool:
    """True for lock contention and session-number collisions; anything else is a real failure."""
    message = str(exc).lower()
    if isinstance(exc, IntegrityError):
        return any(marker in message for marker in SESSION_CONFLICT_MARKERS)
    return any(marker in message for marker in TRANSIENT_MARKERS)


def backoff_delay(attempt: int) -> float:
    """Exponential delay before retry number ``attempt`` (1-based), capped, with full jitter."""
    base = get_setting('CHECKIN_RETRY_BACKOFF')
    ceiling = min(base * (2 ** (attempt - 1)), get_setting('CHECKIN_RETRY_MAX_BACKOFF'))
    return random.uniform(0, ceiling)


def lock_board(board_id, user=None) -> Board:
    """Fetch the board with a row lock. Must be called inside transaction.atomic()."""
    queryset = Board.objects.select_for_update()
    if user is not None:
        queryset = queryset.filter(user=user)
    try:
        return queryset.get(id=board_id)
    except Board.DoesNotExist:
        raise NotFoundError('Board not found.')


def run_locked(operation: Callable[[], T], description: str, max_attempts: Optional[int] = None) -> T:
    """
    Run ``operation`` in its own transaction, retrying on conflicts.

    A failed attempt is rolled back in full, so the board keeps its previous
    aggregate state, and the next attempt waits a jittered, growing delay.
    Integrity errors other than a session-number collision propagate.
    Raises ConcurrentUpdateConflict once attempts run out.
    """
    max_attempts = max_attempts or get_setting('CHECKIN_MAX_ATTEMPTS')
    last_error = None

    for attempt in range(1, max_attempts + 1):
        try:
            with transaction.atomic():
                return operation()
        except (IntegrityError, OperationalError) as e:
            if not is_transient(e):
                raise
            last_error = e
            logger.warning(f"Conflict during {description} (attempt {attempt}/{max_attempts}): {e}")
            if attempt < max_attempts:
                time.sleep(backoff_delay(attempt))

    logger.error(f"Giving up on {description} after {max_attempts} attempts")
    raise ConcurrentUpdateConflict() from last_error

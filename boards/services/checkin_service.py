"""
Check-in recording for a single user.

Creation and deletion run through run_locked so the insert or delete, the
session numbering and the aggregate recompute are one serializable unit per
board. Amount/note edits do not change which dates have check-ins and skip
the recompute.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from django.db.models import Max
from django.utils import timezone

from ..exceptions import FutureDateError, NotFoundError
from ..models import Board, CheckIn
from ..timezones import today_for_user
from .aggregates import AggregateMaintainer
from .locking import lock_board, run_locked

logger = logging.getLogger(__name__)

# Marks an update field the caller did not send (None means "clear it")
UNSET = object()


def resolve_check_in_date(requested_date: Optional[date], today: date) -> date:
    """Default to today; reject anything after today."""
    check_in_date = requested_date or today
    if check_in_date > today:
        raise FutureDateError()
    return check_in_date


def next_session_number(board: Board, check_in_date: date) -> int:
    """
    One past the highest same-day session. Equals the same-day count plus one
    until a sibling is deleted; after that the gap is kept rather than reused.
    Call with the board row locked.
    """
    highest = CheckIn.objects.filter(board=board, date=check_in_date).aggregate(
        highest=Max('session_number')
    )['highest']
    return (highest or 0) + 1


class CheckInService:
    """Records, edits and deletes check-ins on behalf of one user."""

    def __init__(self, user, today: Optional[date] = None):
        self.user = user
        self.today = today or today_for_user(user)

    def get_board(self, board_id) -> Board:
        try:
            return Board.objects.get(id=board_id, user=self.user)
        except (Board.DoesNotExist, ValueError):
            raise NotFoundError('Board not found.')

    def get_check_in(self, check_in_id) -> CheckIn:
        try:
            return CheckIn.objects.select_related('board').get(id=check_in_id, user=self.user)
        except (CheckIn.DoesNotExist, ValueError):
            raise NotFoundError('Check-in not found.')

    def find_active_board(self, board_id=None, board_name: Optional[str] = None) -> Board:
        """Look up a non-archived board by id, or by name when no id is given."""
        boards = Board.objects.filter(user=self.user, is_archived=False)
        try:
            if board_id:
                return boards.get(id=board_id)
            if board_name:
                return boards.get(name=board_name)
        except (Board.DoesNotExist, ValueError):
            pass
        raise NotFoundError('Board not found.')

    def record_check_in(self, board_id, requested_date: Optional[date] = None,
                        amount: Optional[Decimal] = None, note: Optional[str] = None) -> Tuple[CheckIn, Board]:
        """
        Create a check-in and refresh the board's statistics.

        Returns the new check-in and the updated board. Raises NotFoundError
        for boards the user does not own and FutureDateError for dates after
        today; in both cases nothing is written.
        """
        self.get_board(board_id)
        check_in_date = resolve_check_in_date(requested_date, self.today)

        def operation():
            board = lock_board(board_id, user=self.user)
            check_in = CheckIn.objects.create(
                board=board,
                user=self.user,
                date=check_in_date,
                timestamp=timezone.now(),
                amount=amount,
                note=note,
                session_number=next_session_number(board, check_in_date),
            )
            AggregateMaintainer.recompute(board, self.today)
            return check_in, board

        check_in, board = run_locked(operation, f"check-in on board {board_id}")
        logger.info(
            f"Check-in {check_in.id} recorded for board {board.id} on {check_in.date} "
            f"(session {check_in.session_number}, user {self.user.id})"
        )
        return check_in, board

    def quick_check_in(self, board_id=None, board_name: Optional[str] = None,
                       amount: Optional[Decimal] = None, note: Optional[str] = None) -> Tuple[CheckIn, Board]:
        """Check in today on an active board picked by id or name."""
        board = self.find_active_board(board_id=board_id, board_name=board_name)
        return self.record_check_in(board.id, amount=amount, note=note)

    def update_check_in(self, check_in_id, amount=UNSET, note=UNSET) -> CheckIn:
        check_in = self.get_check_in(check_in_id)

        changed = []
        if amount is not UNSET:
            check_in.amount = amount
            changed.append('amount')
        if note is not UNSET:
            check_in.note = note
            changed.append('note')

        if changed:
            check_in.save(update_fields=changed + ['updated_at'])
            logger.info(f"Check-in {check_in.id} updated: {', '.join(changed)}")
        return check_in

    def delete_check_in(self, check_in_id) -> Board:
        """Delete a check-in and return its board with refreshed statistics."""
        board_id = self.get_check_in(check_in_id).board_id

        def operation():
            board = lock_board(board_id, user=self.user)
            deleted, _ = CheckIn.objects.filter(id=check_in_id, user=self.user).delete()
            if not deleted:
                raise NotFoundError('Check-in not found.')
            return AggregateMaintainer.recompute(board, self.today)

        board = run_locked(operation, f"deletion of check-in {check_in_id}")
        logger.info(f"Check-in {check_in_id} deleted from board {board.id} (user {self.user.id})")
        return board

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..models import Board
from .locking import lock_board, run_locked
from .streaks import calculate_current_streak, longest_run

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoardAggregates:
    current_streak: int
    longest_streak: int
    total_check_ins: int
    last_check_in_date: Optional[date]


def derive_aggregates(check_in_dates: Iterable[date], previous_longest: int, today: date) -> BoardAggregates:
    """
    Re-derive a board's statistics from the dates of all its check-ins.

    ``check_in_dates`` has one entry per check-in (duplicates for same-day
    sessions). The longest streak only ever grows: a deleted check-in that
    breaks an old run does not lower the personal record.
    """
    dates = list(check_in_dates)
    current = calculate_current_streak(dates, today)
    return BoardAggregates(
        current_streak=current,
        longest_streak=max(previous_longest, current),
        total_check_ins=len(dates),
        last_check_in_date=max(dates) if dates else None,
    )


def current_aggregates(board: Board) -> BoardAggregates:
    return BoardAggregates(
        current_streak=board.current_streak,
        longest_streak=board.longest_streak,
        total_check_ins=board.total_check_ins,
        last_check_in_date=board.last_check_in_date,
    )


class AggregateMaintainer:
    """Keeps a board's denormalized statistics in line with its check-ins."""

    @staticmethod
    def recompute(board: Board, today: date) -> Board:
        """
        Recompute and persist the board's four derived fields.

        Must run inside the transaction that inserted or deleted the
        check-in, with the board row already locked, so the read-compute-write
        sequence cannot interleave with another writer.
        """
        dates = board.check_ins.values_list('date', flat=True)
        aggregates = derive_aggregates(dates, board.longest_streak, today)

        if aggregates == current_aggregates(board):
            return board

        board.current_streak = aggregates.current_streak
        board.longest_streak = aggregates.longest_streak
        board.total_check_ins = aggregates.total_check_ins
        board.last_check_in_date = aggregates.last_check_in_date
        board.save(update_fields=Board.AGGREGATE_FIELDS + ['updated_at'])

        logger.info(
            f"Recomputed board {board.id}: streak={board.current_streak} "
            f"longest={board.longest_streak} total={board.total_check_ins}"
        )
        return board

    @classmethod
    def rebuild(cls, board_id, today: date, from_history: bool = False) -> Board:
        """
        Locked recompute for backfill and repair. With ``from_history`` the
        longest streak is also raised to the longest run found in the
        check-in history; it is never lowered.
        """
        def operation():
            board = lock_board(board_id)
            if from_history:
                best = longest_run(board.check_ins.values_list('date', flat=True))
                if best > board.longest_streak:
                    logger.info(f"Raising longest streak of board {board.id} from {board.longest_streak} to {best}")
                    board.longest_streak = best
                    board.save(update_fields=['longest_streak', 'updated_at'])
            return cls.recompute(board, today)

        return run_locked(operation, f"rebuild of board {board_id}")

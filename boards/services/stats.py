"""
Read-only statistics over boards. Nothing here is persisted.
"""

from datetime import date, timedelta
from typing import Optional

from ..conf import get_setting
from ..models import Board, CheckIn


def completion_rate(distinct_days: int, window_days: Optional[int] = None) -> int:
    """Percentage of days in the window with at least one check-in."""
    window_days = window_days or get_setting('COMPLETION_WINDOW_DAYS')
    return round(100 * distinct_days / window_days)


def board_stats(board: Board, today: date) -> dict:
    window_days = get_setting('COMPLETION_WINDOW_DAYS')
    window_start = today - timedelta(days=window_days - 1)

    # Distinct dates so several sessions on one day count once
    active_days = board.check_ins.filter(
        date__gte=window_start,
        date__lte=today
    ).values('date').distinct().count()

    return {
        'currentStreak': board.current_streak,
        'longestStreak': board.longest_streak,
        'totalCheckIns': board.total_check_ins,
        'completionRate30d': completion_rate(active_days, window_days),
        'lastCheckInDate': board.last_check_in_date.isoformat() if board.last_check_in_date else None,
    }


def quick_status(user, today: date) -> list:
    """Every active board with whether it has been checked in today."""
    boards = Board.objects.filter(user=user, is_archived=False).order_by('-updated_at')
    checked_today = set(
        CheckIn.objects.filter(user=user, date=today).values_list('board_id', flat=True)
    )
    return [
        {
            'id': board.id,
            'name': board.name,
            'emoji': board.emoji,
            'checkedInToday': board.id in checked_today,
            'currentStreak': board.current_streak,
        }
        for board in boards
    ]


def dashboard_summary(user) -> dict:
    boards = list(Board.objects.filter(user=user, is_archived=False).order_by('-updated_at'))

    return {
        'summary': {
            'totalBoards': len(boards),
            'totalCheckIns': sum(b.total_check_ins for b in boards),
            'totalCurrentStreak': sum(b.current_streak for b in boards),
            'bestStreak': max((b.longest_streak for b in boards), default=0),
        },
        'boards': [
            {
                'id': b.id,
                'name': b.name,
                'emoji': b.emoji,
                'color': b.color,
                'currentStreak': b.current_streak,
                'lastCheckInDate': b.last_check_in_date.isoformat() if b.last_check_in_date else None,
            }
            for b in boards[:5]
        ],
    }

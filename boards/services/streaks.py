"""
Streak calculation over a board's distinct check-in dates.

Everything here is pure: callers pass the dates and the reference "today"
so results are deterministic and need no database.
"""

from datetime import date, timedelta
from typing import Iterable

ONE_DAY = timedelta(days=1)


def calculate_current_streak(dates: Iterable[date], today: date) -> int:
    """
    Count consecutive check-in days ending today, or ending yesterday when
    there is no check-in today yet. A gap of two or more days since the most
    recent check-in means the streak is broken.
    """
    date_set = set(dates)
    if not date_set:
        return 0

    most_recent = max(date_set)
    gap = (today - most_recent).days
    if gap > 1:
        return 0

    # Yesterday still counts: the user has until the end of today
    cursor = today if gap == 0 else most_recent
    streak = 0
    while cursor in date_set:
        streak += 1
        cursor -= ONE_DAY

    return streak


def longest_run(dates: Iterable[date]) -> int:
    """Length of the longest run of consecutive days in ``dates``."""
    longest = 0
    run = 0
    previous = None
    for day in sorted(set(dates)):
        if previous is not None and day - previous == ONE_DAY:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest

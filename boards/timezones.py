from datetime import date, datetime
from typing import Optional

import pytz
from django.utils import timezone

from .conf import get_setting


def is_valid_timezone(tz_name: str) -> bool:
    return tz_name in pytz.all_timezones_set


def local_today(tz_name: Optional[str] = None, now: Optional[datetime] = None) -> date:
    """Return the calendar date of ``now`` (default: timezone.now()) in ``tz_name``."""
    tz = pytz.timezone(tz_name or get_setting('DEFAULT_TIMEZONE'))
    now = now or timezone.now()
    return now.astimezone(tz).date()


def today_for_user(user, now: Optional[datetime] = None) -> date:
    """Today's date in the user's configured timezone."""
    from .models import UserPreference

    prefs = UserPreference.get_or_create_for_user(user)
    return local_today(prefs.timezone, now=now)

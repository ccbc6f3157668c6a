from django.conf import settings

DEFAULTS = {
    'DEFAULT_TIMEZONE': 'UTC',
    'CHECKIN_MAX_ATTEMPTS': 3,
    'CHECKIN_RETRY_BACKOFF': 0.05,
    'CHECKIN_RETRY_MAX_BACKOFF': 1.0,
    'COMPLETION_WINDOW_DAYS': 30,
}


def get_setting(name):
    """Read a value from settings.STREAKBOARD, falling back to DEFAULTS."""
    return getattr(settings, 'STREAKBOARD', {}).get(name, DEFAULTS[name])

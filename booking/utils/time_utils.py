from datetime import datetime

from django.utils import timezone

DATE_FORMAT = "%Y-%m-%d"
SLOT_FORMAT = "%H:%M"


def business_now():
    """Current date-time in the configured business time zone (settings.TIME_ZONE)."""
    return timezone.localtime()


def business_today():
    return business_now().date()


def slot_to_minutes(slot: str) -> int:
    """
    Convert an 'HH:MM' slot into minutes after midnight.
    Raises ValueError for anything that is not a valid 24h time.
    """
    t = datetime.strptime(slot.strip(), SLOT_FORMAT).time()
    return t.hour * 60 + t.minute


def parse_date(value):
    """
    Parse a date string in 'YYYY-MM-DD' format into a date object.
    Returns None if parsing fails.
    """
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        return None

"""
Time Conversion Utility

Converts the timestamps submitted by the schedule form into the naive UTC
datetimes stored in the database, and back into local time for display.
"""

from datetime import datetime
import pytz


def utc_now():
    """
    Get the current time as a naive UTC datetime (the storage format).

    Returns:
        datetime: Current UTC time without tzinfo
    """
    return datetime.now(pytz.utc).replace(tzinfo=None, microsecond=0)


def to_utc_naive(value, timezone='UTC'):
    """
    Normalize a datetime to naive UTC.

    Args:
        value (datetime): Aware or naive datetime
        timezone (str): Zone used to interpret a naive value

    Returns:
        datetime: Naive UTC datetime
    """
    if value.tzinfo is None:
        value = pytz.timezone(timezone).localize(value)
    return value.astimezone(pytz.utc).replace(tzinfo=None)


def _checked_utc(parsed, timezone, original):
    # Times at the edges of the datetime range overflow when shifted to UTC
    try:
        return to_utc_naive(parsed, timezone)
    except OverflowError as e:
        raise ValueError(f"Invalid date/time '{original}'. Out of range") from e


def parse_scheduled_time(value, timezone='UTC'):
    """
    Parse a scheduled time into naive UTC.

    Accepts datetime objects and ISO 8601 strings such as the
    "2025-01-01T09:00" produced by a datetime-local input. Values without
    an offset are interpreted in the given timezone.

    Args:
        value (str or datetime): Scheduled time
        timezone (str): Timezone string (default: 'UTC')

    Returns:
        datetime: Naive UTC datetime

    Raises:
        ValueError: If value is empty or not a valid timestamp
    """
    if isinstance(value, datetime):
        return _checked_utc(value, timezone, value)

    text = (value or '').strip()
    if not text:
        raise ValueError("Empty date/time")

    if text.endswith('Z'):
        text = text[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid date/time '{value}'. Expected YYYY-MM-DDTHH:MM") from e

    return _checked_utc(parsed, timezone, value)


def format_local_time(value, timezone='UTC', fmt='%Y-%m-%d %H:%M'):
    """
    Format a stored naive UTC datetime in the given timezone.

    Args:
        value (datetime): Naive UTC datetime
        timezone (str): Target timezone
        fmt (str): strftime format

    Returns:
        str: Formatted local time, or '' for None
    """
    if value is None:
        return ''
    aware = pytz.utc.localize(value) if value.tzinfo is None else value
    return aware.astimezone(pytz.timezone(timezone)).strftime(fmt)

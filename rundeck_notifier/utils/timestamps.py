"""Timestamp utilities for UTC handling and Rundeck date parsing.

Rundeck reports execution dates two ways: an ``unixtime`` attribute holding
epoch milliseconds and an ISO 8601 text value. This module converts both to
timezone-aware UTC datetimes and renders execution durations as words
("3 minutes 27 seconds") for the build log.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple, Union

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Args:
        dt: Datetime to convert (can be None)

    Returns:
        Timezone-aware datetime in UTC, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def from_epoch_millis(millis: Union[int, str]) -> datetime:
    """Convert epoch milliseconds to a UTC datetime without float rounding.

    Args:
        millis: Milliseconds since 1970-01-01T00:00:00Z (int or digit string)

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        ValueError: If millis is not an integer value
        OverflowError: If millis is outside the datetime range

    Example:
        >>> from_epoch_millis(1302183830082).isoformat()
        '2011-04-07T13:43:50.082000+00:00'
    """
    return EPOCH + timedelta(milliseconds=int(millis))


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 datetime string to UTC datetime.

    Supports the formats Rundeck emits:
    - 2011-04-07T13:43:50Z
    - 2011-04-07T13:43:50.082Z
    - 2011-04-07T13:43:50+00:00
    - 2011-04-07T13:43:50

    Args:
        iso_string: ISO 8601 formatted datetime string

    Returns:
        Timezone-aware datetime in UTC, or None if empty or unparseable
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None


_DURATION_UNITS = (
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


def format_duration_words(duration: Optional[timedelta]) -> str:
    """Format a duration as words, e.g. ``3 minutes 27 seconds``.

    Leading and trailing zero units are dropped, zero units between two
    non-zero units are kept ("1 hour 0 minutes 5 seconds"), and singular
    unit names are used for a value of 1. Sub-second precision is truncated.
    A zero or missing duration renders as ``0 seconds``.

    Args:
        duration: Duration to render

    Returns:
        Human-readable duration
    """
    if duration is None:
        return "0 seconds"

    remaining = max(int(duration.total_seconds()), 0)
    parts: List[Tuple[int, str]] = []
    for unit, size in _DURATION_UNITS:
        value, remaining = divmod(remaining, size)
        parts.append((value, unit))

    while parts and parts[0][0] == 0:
        parts.pop(0)
    while parts and parts[-1][0] == 0:
        parts.pop()

    if not parts:
        return "0 seconds"

    return " ".join(
        f"{value} {unit}" if value == 1 else f"{value} {unit}s" for value, unit in parts
    )

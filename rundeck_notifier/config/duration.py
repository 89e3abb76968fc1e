"""Duration parsing for configuration values such as the poll interval."""

import re
from datetime import timedelta

from rundeck_notifier.utils.timestamps import format_duration_words


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed or is out of range."""

    pass


_ISO8601_PATTERN = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$")
_HUMAN_PATTERN = re.compile(r"(\d+)\s*([smhd])")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(duration_str: str) -> int:
    """Parse a duration string to seconds.

    Supports human-readable ("5s", "1m", "1h30m") and ISO-8601 ("PT5S",
    "PT30M", "P1D") forms.

    Args:
        duration_str: Duration string to parse

    Returns:
        Duration in seconds (never zero)

    Raises:
        DurationParseError: If the duration string is invalid

    Examples:
        >>> parse_duration("5s")
        5
        >>> parse_duration("PT30M")
        1800
    """
    duration_str = duration_str.strip()

    if not duration_str:
        raise DurationParseError("Duration string cannot be empty")

    if duration_str.upper().startswith("P"):
        total = _parse_iso8601_duration(duration_str.upper())
    else:
        total = _parse_human_readable_duration(duration_str.lower())

    if total == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")
    return total


def _parse_iso8601_duration(duration_str: str) -> int:
    match = _ISO8601_PATTERN.match(duration_str)
    if not match or duration_str in ("P", "PT"):
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{duration_str}'. "
            "Expected format like 'PT5S', 'PT30M', 'PT1H' or 'P1D'"
        )

    days, hours, minutes, seconds = match.groups()
    return (
        int(days or 0) * 86400
        + int(hours or 0) * 3600
        + int(minutes or 0) * 60
        + int(float(seconds or 0))
    )


def _parse_human_readable_duration(duration_str: str) -> int:
    matches = _HUMAN_PATTERN.findall(duration_str)
    if not matches:
        raise DurationParseError(
            f"Invalid duration format: '{duration_str}'. "
            "Expected format like '5s', '30m', '1h', or combinations like '1h30m'"
        )

    # Reject leftovers such as "5x" or "1h 30"
    parsed = "".join(f"{num}{unit}" for num, unit in matches)
    if parsed != re.sub(r"\s+", "", duration_str):
        raise DurationParseError(
            f"Invalid characters in duration: '{duration_str}'. "
            "Use only digits and units: s (seconds), m (minutes), h (hours), d (days)"
        )

    return sum(int(num) * _UNIT_SECONDS[unit] for num, unit in matches)


def validate_duration_range(
    duration_seconds: int,
    min_seconds: int,
    max_seconds: int,
    label: str = "Duration",
) -> None:
    """Check that a duration lies within [min_seconds, max_seconds].

    Raises:
        DurationParseError: If the duration is outside the range
    """
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"{label} too short: {_words(duration_seconds)}. Minimum is {_words(min_seconds)}."
        )

    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"{label} too long: {_words(duration_seconds)}. Maximum is {_words(max_seconds)}."
        )


def _words(seconds: int) -> str:
    return format_duration_words(timedelta(seconds=seconds))

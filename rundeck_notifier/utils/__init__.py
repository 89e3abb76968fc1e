"""Utility functions for time handling."""

from .timestamps import (
    ensure_utc,
    format_duration_words,
    from_epoch_millis,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "from_epoch_millis",
    "parse_iso_datetime",
    "format_duration_words",
]

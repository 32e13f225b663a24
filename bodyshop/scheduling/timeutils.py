"""
Time Arithmetic Helpers

Wall-clock times travel through the API as ``HH:MM`` strings and dates as
``YYYY-MM-DD``. Arithmetic is done on minutes since midnight; there is no
timezone handling.
"""

import re
from datetime import date, datetime

from bodyshop.core.errors import InvalidTimeFormat, ValidationError

MINUTES_PER_DAY = 24 * 60

_TIME_RE = re.compile(r"\d{1,2}:\d{2}")
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def to_minutes(value: str) -> int:
    """
    Converts an ``HH:MM`` string to minutes since midnight.

    Raises:
        InvalidTimeFormat: malformed string, hour >= 24 or minute >= 60
    """
    if not isinstance(value, str) or not _TIME_RE.fullmatch(value):
        raise InvalidTimeFormat(f"Invalid time format: {value!r}. Use HH:MM")

    hours, minutes = (int(part) for part in value.split(":"))
    if hours >= 24 or minutes >= 60:
        raise InvalidTimeFormat(f"Invalid time: {value!r}")

    return hours * 60 + minutes


def to_time_string(minutes: int) -> str:
    """Converts minutes since midnight back to a zero-padded ``HH:MM``."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidTimeFormat(f"Time offset {minutes} is outside a single day")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: str) -> str:
    """``"9:00"`` -> ``"09:00"``; stored times must sort as strings."""
    return to_time_string(to_minutes(value))


def add_minutes(start: str, duration: int) -> str:
    return to_time_string(to_minutes(start) + duration)


def parse_date(value: str) -> date:
    """Parses a strict ``YYYY-MM-DD`` calendar date."""
    if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")

from __future__ import annotations

import re

from salon_scheduling.application.exceptions import ParseError

MINUTES_PER_DAY = 24 * 60

_LABEL_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})\s*(am|pm)$")
_24H_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def to_minutes(label: str) -> int:
    """Parse a 12-hour label ("H:MM AM|PM") into minutes since midnight."""
    if not isinstance(label, str):
        raise ParseError(f"Time label must be a string, got {type(label).__name__}")

    match = _LABEL_PATTERN.match(label.strip().lower())
    if not match:
        raise ParseError(f"Malformed time label: {label!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    am_pm = match.group(3)

    if not 1 <= hour <= 12:
        raise ParseError(f"Hour out of range in {label!r}")
    if not 0 <= minute <= 59:
        raise ParseError(f"Minute out of range in {label!r}")

    if am_pm == "pm" and hour != 12:
        hour += 12
    elif am_pm == "am" and hour == 12:
        hour = 0

    return hour * 60 + minute


def to_label(minutes: int) -> str:
    """Format minutes since midnight as a canonical 12-hour label, wrapping past midnight."""
    minutes = minutes % MINUTES_PER_DAY
    hour24, minute = divmod(minutes, 60)
    period = "PM" if hour24 >= 12 else "AM"
    hour12 = hour24 % 12 or 12
    return f"{hour12}:{minute:02d} {period}"


def add_duration(start_label: str, duration_minutes: int) -> str:
    """End label for something starting at ``start_label`` and lasting ``duration_minutes``."""
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise ValueError(f"Duration must be a positive number of minutes, got {duration_minutes!r}")
    return to_label(to_minutes(start_label) + duration_minutes)


def normalize_label(label: str) -> str:
    """Canonical form of a label, so "09:30 AM" and "9:30 am" compare equal."""
    return to_label(to_minutes(label))


def hour_of(label: str) -> int:
    return to_minutes(label) // 60


def to_24h(label: str) -> str:
    """12-hour label -> "HH:MM" as used by the salon backend."""
    hour, minute = divmod(to_minutes(label), 60)
    return f"{hour:02d}:{minute:02d}"


def from_24h(value: str) -> str:
    """Backend "HH:MM" or "HH:MM:SS" -> canonical 12-hour label."""
    match = _24H_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ParseError(f"Malformed 24-hour time: {value!r}")
    hour = int(match.group(1))
    minute = int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ParseError(f"24-hour time out of range: {value!r}")
    return to_label(hour * 60 + minute)

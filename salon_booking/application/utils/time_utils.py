from __future__ import annotations

import re
from datetime import date, datetime, time

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")


def parse_time_24h(value: str | time) -> time:
    """
    Parse "HH:MM" or "HH:MM:SS" (the stored schedule format) into a time.
    Slots are laid out on whole minutes, so seconds are validated and then dropped.
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    match = _TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    hour = int(match.group(1))
    minute = int(match.group(2))
    second = int(match.group(3)) if match.group(3) else 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59 and 0 <= second <= 59):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return time(hour, minute)


def format_time_24h(value: time) -> str:
    return value.strftime("%H:%M")


def day_of_week(value: date) -> int:
    """Weekday with Sunday as 0, matching how working windows are stored."""
    return (value.weekday() + 1) % 7


def at(on_date: date, clock_time: time) -> datetime:
    return datetime.combine(on_date, clock_time)

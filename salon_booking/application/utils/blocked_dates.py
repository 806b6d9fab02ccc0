from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from salon_booking.domain.exceptions import InvalidRange


def as_calendar_date(value: date | datetime | str) -> date:
    """Strip any time-of-day so values compare by calendar date only."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise TypeError(f"Cannot convert {type(value)} to date")


def expand_range(from_date: date | datetime | str, to_date: date | datetime | str) -> list[date]:
    """Every calendar day from from_date to to_date, inclusive."""
    start = as_calendar_date(from_date)
    end = as_calendar_date(to_date)
    if start > end:
        raise InvalidRange(f"From date {start.isoformat()} must be before or equal to to date {end.isoformat()}")

    dates: list[date] = []
    current = start
    while current <= end:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def normalize_blocked(blocked: Iterable[date | datetime | str]) -> frozenset[date]:
    return frozenset(as_calendar_date(value) for value in blocked)


def is_blocked(value: date | datetime | str, blocked: Iterable[date | datetime | str]) -> bool:
    return as_calendar_date(value) in normalize_blocked(blocked)

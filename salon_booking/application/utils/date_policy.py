from __future__ import annotations

from datetime import date, timedelta


def not_bookable_reason(
    target_date: date,
    today: date,
    allow_same_day: bool = False,
    horizon_days: int | None = None,
) -> str | None:
    """Return why a date cannot be booked, or None if it can."""
    if target_date < today:
        return "date_in_past"
    if target_date == today and not allow_same_day:
        return "same_day_not_allowed"
    if horizon_days is not None and target_date > today + timedelta(days=horizon_days):
        return "beyond_booking_horizon"
    return None

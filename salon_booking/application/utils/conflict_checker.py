from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from salon_booking.domain.entities.booked_interval import BookedInterval


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap: touching boundaries do not conflict."""
    return a_start < b_end and b_start < a_end


def find_conflicts(
    candidate_start: datetime,
    candidate_end: datetime,
    booked_intervals: Iterable[BookedInterval],
    exclude_appointment_id: str | None = None,
) -> list[BookedInterval]:
    """Return every booked interval overlapping [candidate_start, candidate_end)."""
    conflicts: list[BookedInterval] = []
    for interval in booked_intervals:
        if exclude_appointment_id and interval.appointment_id == exclude_appointment_id:
            continue
        if intervals_overlap(candidate_start, candidate_end, interval.start, interval.end):
            conflicts.append(interval)
    return conflicts


def overlaps(
    candidate_start: datetime,
    candidate_end: datetime,
    booked_intervals: Iterable[BookedInterval],
    exclude_appointment_id: str | None = None,
) -> bool:
    for interval in booked_intervals:
        if exclude_appointment_id and interval.appointment_id == exclude_appointment_id:
            continue
        if intervals_overlap(candidate_start, candidate_end, interval.start, interval.end):
            return True
    return False

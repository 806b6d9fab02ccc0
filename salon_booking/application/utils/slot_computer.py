from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

from salon_booking.application.utils.conflict_checker import overlaps
from salon_booking.application.utils.time_utils import at, day_of_week
from salon_booking.domain.entities.booked_interval import BookedInterval
from salon_booking.domain.entities.candidate_slot import CandidateSlot
from salon_booking.domain.entities.working_window import WorkingWindow
from salon_booking.domain.exceptions import InvalidDuration, InvalidWorkingWindow


def compute_slots(
    window: WorkingWindow,
    on_date: date,
    service_duration_minutes: int,
    booked_intervals: Sequence[BookedInterval],
    is_blocked: bool = False,
    exclude_appointment_id: str | None = None,
) -> list[CandidateSlot]:
    """
    Candidate start times for an appointment of the given aggregate duration.

    Starts at window.start_time and steps by window.slot_interval_minutes. A start
    is offered only if the whole appointment finishes by window.end_time; it is
    marked unavailable when [start, start + duration) overlaps a booked interval.
    Blocked dates and inactive windows produce no slots.
    """
    if service_duration_minutes <= 0:
        raise InvalidDuration(f"Service duration must be positive, got {service_duration_minutes}")
    if window.day_of_week != day_of_week(on_date):
        raise InvalidWorkingWindow(
            f"Window for {window.day_name} cannot be applied to {on_date.isoformat()}"
        )

    if is_blocked or not window.is_active:
        return []

    duration = timedelta(minutes=service_duration_minutes)
    step = timedelta(minutes=window.slot_interval_minutes)
    window_end = at(on_date, window.end_time)

    slots: list[CandidateSlot] = []
    current = at(on_date, window.start_time)
    while current + duration <= window_end:
        slot_end = current + duration
        available = not overlaps(current, slot_end, booked_intervals, exclude_appointment_id)
        slots.append(CandidateSlot(start_time=current.time(), available=available))
        current += step

    return slots


def available_start_times(slots: Sequence[CandidateSlot]) -> list[str]:
    return [slot.time_24h for slot in slots if slot.available]

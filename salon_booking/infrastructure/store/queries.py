from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from salon_booking.application.utils.conflict_checker import intervals_overlap
from salon_booking.domain.entities.appointment import Appointment


def active_for_date(appointments: Iterable[Appointment], practitioner_id: str, on_date: date) -> list[Appointment]:
    result = [
        appt
        for appt in appointments
        if appt.practitioner_id == practitioner_id and appt.is_active and appt.appointment_date == on_date
    ]
    result.sort(key=lambda appt: appt.start)
    return result


def conflicting_ids(appointments: Iterable[Appointment], candidate: Appointment) -> list[str]:
    """Ids of active appointments of the same practitioner that overlap candidate."""
    if not candidate.is_active:
        return []
    return [
        appt.appointment_id
        for appt in appointments
        if appt.appointment_id != candidate.appointment_id
        and appt.practitioner_id == candidate.practitioner_id
        and appt.is_active
        and intervals_overlap(candidate.start, candidate.end, appt.start, appt.end)
    ]


def is_same_booking(stored: Appointment | None, expected: Appointment) -> bool:
    """True if stored is still the active booking expected describes."""
    return (
        stored is not None
        and stored.is_active
        and stored.start == expected.start
        and stored.end == expected.end
    )

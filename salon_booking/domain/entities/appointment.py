from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from salon_booking.domain.entities.booked_interval import BookedInterval


@dataclass(frozen=True)
class Appointment:
    appointment_id: str
    practitioner_id: str
    start: datetime
    end: datetime
    service_keys: tuple[str, ...] = field(default_factory=tuple)
    status: str = "scheduled"  # "scheduled", "cancelled"
    client_name: str | None = None
    client_email: str | None = None
    notes: str | None = None
    is_active: bool = True
    calendar_event_id: str | None = None
    created_at: float | None = None

    @property
    def appointment_date(self) -> date:
        return self.start.date()

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def to_interval(self) -> BookedInterval:
        return BookedInterval(start=self.start, end=self.end, appointment_id=self.appointment_id)

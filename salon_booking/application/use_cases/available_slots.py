from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from salon_booking.application.ports.appointment_store import AppointmentStorePort
from salon_booking.application.ports.blocked_date_store import BlockedDateStorePort
from salon_booking.application.ports.schedule_store import ScheduleStorePort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.utils.blocked_dates import is_blocked
from salon_booking.application.utils.date_policy import not_bookable_reason
from salon_booking.application.utils.slot_computer import compute_slots
from salon_booking.application.utils.time_utils import day_of_week
from salon_booking.domain.entities.candidate_slot import CandidateSlot
from salon_booking.domain.exceptions import InvalidDuration


@dataclass(frozen=True)
class SlotsResult:
    practitioner_id: str
    date: date
    duration_minutes: int
    slots: list[CandidateSlot]
    reason: str | None = None  # why no slots are offered, if known

    @property
    def available_times(self) -> list[str]:
        return [slot.time_24h for slot in self.slots if slot.available]


class AvailableSlotsUseCase:
    """Materializes the slot computation inputs from the stores for one practitioner/date."""

    def __init__(
        self,
        schedules: ScheduleStorePort,
        appointments: AppointmentStorePort,
        blocked_dates: BlockedDateStorePort,
        catalog: ServiceCatalogPort,
        timezone: ZoneInfo,
        allow_same_day: bool = False,
        horizon_days: int | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._schedules = schedules
        self._appointments = appointments
        self._blocked_dates = blocked_dates
        self._catalog = catalog
        self._timezone = timezone
        self._allow_same_day = allow_same_day
        self._horizon_days = horizon_days
        self._today = today or (lambda: datetime.now(self._timezone).date())
        self._logger = logging.getLogger(__name__)

    def today(self) -> date:
        return self._today()

    def aggregate_duration(self, service_keys: Sequence[str]) -> int:
        """Sum of the catalog durations of every selected service."""
        return sum(self._catalog.get_duration_minutes(key) for key in service_keys)

    def execute(
        self,
        practitioner_id: str,
        on_date: date,
        service_keys: Sequence[str] | None = None,
        duration_minutes: int | None = None,
        exclude_appointment_id: str | None = None,
    ) -> SlotsResult:
        duration = duration_minutes if duration_minutes is not None else self.aggregate_duration(service_keys or ())
        if duration <= 0:
            raise InvalidDuration(f"Service duration must be positive, got {duration}")

        reason = not_bookable_reason(on_date, self.today(), self._allow_same_day, self._horizon_days)
        if reason:
            return self._empty(practitioner_id, on_date, duration, reason)

        window = self._schedules.get_window(practitioner_id, day_of_week(on_date))
        if window is None:
            return self._empty(practitioner_id, on_date, duration, "no_working_hours")

        blocked = is_blocked(on_date, self._blocked_dates.dates(practitioner_id))
        booked = [appt.to_interval() for appt in self._appointments.list_active_for_date(practitioner_id, on_date)]

        slots = compute_slots(
            window,
            on_date,
            duration,
            booked,
            is_blocked=blocked,
            exclude_appointment_id=exclude_appointment_id,
        )

        if blocked:
            reason = "date_blocked"
        elif not window.is_active:
            reason = "no_working_hours"
        elif not slots:
            reason = "duration_exceeds_working_hours"

        self._logger.info(
            "Slots computed",
            extra={
                "practitioner_id": practitioner_id,
                "date": on_date.isoformat(),
                "duration": duration,
                "slot_count": len(slots),
                "reason": reason,
            },
        )
        return SlotsResult(
            practitioner_id=practitioner_id,
            date=on_date,
            duration_minutes=duration,
            slots=slots,
            reason=reason,
        )

    def _empty(self, practitioner_id: str, on_date: date, duration: int, reason: str) -> SlotsResult:
        self._logger.info(
            "No slots offered",
            extra={"practitioner_id": practitioner_id, "date": on_date.isoformat(), "reason": reason},
        )
        return SlotsResult(
            practitioner_id=practitioner_id,
            date=on_date,
            duration_minutes=duration,
            slots=[],
            reason=reason,
        )

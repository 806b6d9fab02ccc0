from __future__ import annotations

import logging
import threading
import time as time_module
import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import ExitStack, contextmanager
from dataclasses import replace
from datetime import date, time, timedelta

from salon_booking.application.exceptions import AppointmentNotFound, DateNotBookable, SlotUnavailable
from salon_booking.application.ports.appointment_store import AppointmentStorePort
from salon_booking.application.ports.calendar import CalendarPort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.use_cases.available_slots import AvailableSlotsUseCase, SlotsResult
from salon_booking.application.utils.conflict_checker import find_conflicts
from salon_booking.application.utils.time_utils import at, format_time_24h
from salon_booking.domain.entities.appointment import Appointment


class BookingUseCase:
    """
    Confirms, moves and cancels appointments.

    Every change to a practitioner's day runs under a per (practitioner, date) lock,
    and the store re-checks overlap on insert, so two concurrent requests for the same
    slot cannot both succeed. A reschedule holds the locks of both the old and the
    new date. Calendar sync runs outside the locks and only records its event id if
    the booking is still unchanged when the call returns.
    """

    def __init__(
        self,
        slots: AvailableSlotsUseCase,
        appointments: AppointmentStorePort,
        catalog: ServiceCatalogPort,
        calendar: CalendarPort | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._slots = slots
        self._appointments = appointments
        self._catalog = catalog
        self._calendar = calendar
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._locks: dict[tuple[str, date], threading.Lock] = {}
        self._lock_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, practitioner_id: str, on_date: date) -> threading.Lock:
        with self._lock_lock:
            key = (practitioner_id, on_date)
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    @contextmanager
    def _locked(self, practitioner_id: str, *dates: date) -> Iterator[None]:
        # Locks are taken in date order
        with ExitStack() as stack:
            for on_date in sorted(set(dates)):
                stack.enter_context(self._get_lock(practitioner_id, on_date))
            yield

    @contextmanager
    def _locked_appointment(self, appointment_id: str, *other_dates: date) -> Iterator[Appointment]:
        """Lock the appointment's current day (plus other_dates) and yield a fresh copy."""
        while True:
            seen = self.get(appointment_id)
            with self._locked(seen.practitioner_id, seen.appointment_date, *other_dates):
                stored = self.get(appointment_id)
                # Moved to another day before we got the lock: lock that day instead
                if stored.appointment_date == seen.appointment_date:
                    yield stored
                    return

    def book(
        self,
        practitioner_id: str,
        on_date: date,
        start_time: time,
        service_keys: Sequence[str],
        client_name: str | None = None,
        client_email: str | None = None,
        notes: str | None = None,
    ) -> Appointment:
        duration = self._slots.aggregate_duration(service_keys)

        with self._locked(practitioner_id, on_date):
            result = self._slots.execute(practitioner_id, on_date, duration_minutes=duration)
            self._require_offered(result, start_time)

            start = at(on_date, start_time)
            appointment = Appointment(
                appointment_id=self._id_factory(),
                practitioner_id=practitioner_id,
                start=start,
                end=start + timedelta(minutes=duration),
                service_keys=tuple(key.lower().strip() for key in service_keys),
                client_name=client_name,
                client_email=client_email,
                notes=notes,
                created_at=time_module.time(),
            )
            self._save_if_free(appointment)

        self._logger.info(
            "Appointment booked",
            extra={
                "appointment_id": appointment.appointment_id,
                "practitioner_id": practitioner_id,
                "date": on_date.isoformat(),
                "time": format_time_24h(start_time),
                "duration": duration,
            },
        )
        return self._push_to_calendar(appointment)

    def reschedule(self, appointment_id: str, on_date: date, start_time: time) -> Appointment:
        with self._locked_appointment(appointment_id, on_date) as existing:
            if not existing.is_active:
                raise AppointmentNotFound(f"Appointment {appointment_id} is cancelled")

            practitioner_id = existing.practitioner_id
            duration = existing.duration_minutes
            result = self._slots.execute(
                practitioner_id,
                on_date,
                duration_minutes=duration,
                exclude_appointment_id=appointment_id,
            )
            self._require_offered(result, start_time, exclude_appointment_id=appointment_id)

            start = at(on_date, start_time)
            moved = replace(existing, start=start, end=start + timedelta(minutes=duration), calendar_event_id=None)
            self._save_if_free(moved)

        self._logger.info(
            "Appointment rescheduled",
            extra={
                "appointment_id": appointment_id,
                "practitioner_id": practitioner_id,
                "date": on_date.isoformat(),
                "time": format_time_24h(start_time),
            },
        )
        self._remove_from_calendar(existing)
        return self._push_to_calendar(moved)

    def cancel(self, appointment_id: str) -> Appointment:
        with self._locked_appointment(appointment_id) as existing:
            if not existing.is_active:
                return existing
            cancelled = replace(existing, is_active=False, status="cancelled")
            self._appointments.save(cancelled)

        self._logger.info(
            "Appointment cancelled",
            extra={"appointment_id": appointment_id, "practitioner_id": existing.practitioner_id},
        )
        self._remove_from_calendar(existing)
        return cancelled

    def get(self, appointment_id: str) -> Appointment:
        appointment = self._appointments.get(appointment_id)
        if appointment is None:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")
        return appointment

    def list_for_date(self, practitioner_id: str, on_date: date) -> list[Appointment]:
        return self._appointments.list_active_for_date(practitioner_id, on_date)

    def _require_offered(
        self,
        result: SlotsResult,
        start_time: time,
        exclude_appointment_id: str | None = None,
    ) -> None:
        if not result.slots and result.reason and result.reason != "duration_exceeds_working_hours":
            raise DateNotBookable(result.date, result.reason)

        requested = format_time_24h(start_time)
        slot = next((s for s in result.slots if s.start_time == start_time), None)
        if slot is None:
            raise SlotUnavailable(f"{requested} is not an offered start time on {result.date.isoformat()}")
        if not slot.available:
            start = at(result.date, start_time)
            booked = [
                appt.to_interval()
                for appt in self._appointments.list_active_for_date(result.practitioner_id, result.date)
            ]
            conflicts = find_conflicts(
                start,
                start + timedelta(minutes=result.duration_minutes),
                booked,
                exclude_appointment_id=exclude_appointment_id,
            )
            raise SlotUnavailable(
                f"{requested} on {result.date.isoformat()} overlaps an existing appointment",
                conflicting_appointment_ids=[c.appointment_id for c in conflicts if c.appointment_id],
            )

    def _save_if_free(self, appointment: Appointment) -> None:
        conflicts = self._appointments.save_if_free(appointment)
        if conflicts:
            self._logger.warning(
                "Booking rejected by store conflict check",
                extra={"appointment_id": appointment.appointment_id, "conflicts": conflicts},
            )
            raise SlotUnavailable(
                f"{format_time_24h(appointment.start.time())} on {appointment.appointment_date.isoformat()} "
                "overlaps an existing appointment",
                conflicting_appointment_ids=conflicts,
            )

    def _push_to_calendar(self, appointment: Appointment) -> Appointment:
        if self._calendar is None:
            return appointment

        names = []
        for key in appointment.service_keys:
            entry = self._catalog.get_service(key)
            names.append(entry.display_name if entry else key)
        title = f"{', '.join(names) or 'Appointment'} - {appointment.client_name or 'Client'}"

        try:
            event_id = self._calendar.create_event(
                start=appointment.start,
                end=appointment.end,
                title=title,
                description=appointment.notes,
                attendee_name=appointment.client_name,
                attendee_email=appointment.client_email,
                metadata={
                    "appointment_id": appointment.appointment_id,
                    "practitioner_id": appointment.practitioner_id,
                    "service_keys": list(appointment.service_keys),
                },
            )
        except Exception as e:
            # The booking stands even if the external calendar is unreachable
            self._logger.error(
                "Error creating calendar event",
                extra={"appointment_id": appointment.appointment_id, "error": str(e)},
            )
            return appointment

        if self._appointments.set_calendar_event_id(appointment, event_id):
            return replace(appointment, calendar_event_id=event_id)

        # Cancelled or moved while the event was being created
        self._logger.warning(
            "Booking changed during calendar sync, dropping event",
            extra={"appointment_id": appointment.appointment_id, "event_id": event_id},
        )
        self._calendar.cancel_event(event_id)
        return self._appointments.get(appointment.appointment_id) or appointment

    def _remove_from_calendar(self, appointment: Appointment) -> None:
        if self._calendar is None or not appointment.calendar_event_id:
            return
        if not self._calendar.cancel_event(appointment.calendar_event_id):
            self._logger.warning(
                "Calendar event not removed",
                extra={"appointment_id": appointment.appointment_id, "event_id": appointment.calendar_event_id},
            )

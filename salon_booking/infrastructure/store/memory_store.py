from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date

from salon_booking.application.exceptions import DateAlreadyBlocked
from salon_booking.application.ports.appointment_store import AppointmentStorePort
from salon_booking.application.ports.blocked_date_store import BlockedDateStorePort
from salon_booking.application.ports.schedule_store import ScheduleStorePort
from salon_booking.domain.entities.appointment import Appointment
from salon_booking.domain.entities.blocked_date import BlockedDate
from salon_booking.domain.entities.working_window import WorkingWindow
from salon_booking.infrastructure.store.queries import active_for_date, conflicting_ids, is_same_booking


class MemoryScheduleStore(ScheduleStorePort):
    def __init__(self) -> None:
        self._weeks: dict[str, dict[int, WorkingWindow]] = {}
        self._lock = threading.Lock()

    def get_week(self, practitioner_id: str) -> list[WorkingWindow]:
        with self._lock:
            week = self._weeks.get(practitioner_id, {})
            return [week[day] for day in sorted(week)]

    def get_window(self, practitioner_id: str, day_of_week: int) -> WorkingWindow | None:
        with self._lock:
            return self._weeks.get(practitioner_id, {}).get(day_of_week)

    def replace_week(self, practitioner_id: str, windows: list[WorkingWindow]) -> None:
        with self._lock:
            self._weeks[practitioner_id] = {window.day_of_week: window for window in windows}


class MemoryAppointmentStore(AppointmentStorePort):
    def __init__(self) -> None:
        self._appointments: dict[str, Appointment] = {}
        self._lock = threading.Lock()

    def get(self, appointment_id: str) -> Appointment | None:
        with self._lock:
            return self._appointments.get(appointment_id)

    def list_active_for_date(self, practitioner_id: str, on_date: date) -> list[Appointment]:
        with self._lock:
            return active_for_date(self._appointments.values(), practitioner_id, on_date)

    def save_if_free(self, appointment: Appointment) -> list[str]:
        with self._lock:
            conflicts = conflicting_ids(self._appointments.values(), appointment)
            if conflicts:
                return conflicts
            self._appointments[appointment.appointment_id] = appointment
            return []

    def save(self, appointment: Appointment) -> None:
        with self._lock:
            self._appointments[appointment.appointment_id] = appointment

    def set_calendar_event_id(self, appointment: Appointment, event_id: str | None) -> bool:
        with self._lock:
            stored = self._appointments.get(appointment.appointment_id)
            if not is_same_booking(stored, appointment):
                return False
            self._appointments[appointment.appointment_id] = replace(stored, calendar_event_id=event_id)
            return True


class MemoryBlockedDateStore(BlockedDateStorePort):
    def __init__(self) -> None:
        self._blocked: dict[str, dict[date, BlockedDate]] = {}
        self._lock = threading.Lock()

    def list_blocked(self, practitioner_id: str) -> list[BlockedDate]:
        with self._lock:
            entries = self._blocked.get(practitioner_id, {})
            return [entries[day] for day in sorted(entries)]

    def add(self, practitioner_id: str, blocked: BlockedDate) -> None:
        with self._lock:
            entries = self._blocked.setdefault(practitioner_id, {})
            if blocked.blocked_date in entries:
                raise DateAlreadyBlocked(f"{blocked.blocked_date.isoformat()} is already blocked")
            entries[blocked.blocked_date] = blocked

    def remove(self, practitioner_id: str, blocked_date: date) -> bool:
        with self._lock:
            entries = self._blocked.get(practitioner_id, {})
            return entries.pop(blocked_date, None) is not None



from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from salon_booking.domain.entities.appointment import Appointment


class AppointmentStorePort(ABC):
    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def list_active_for_date(self, practitioner_id: str, on_date: date) -> list[Appointment]:
        """Active, non-cancelled appointments for a practitioner starting on on_date."""
        raise NotImplementedError

    @abstractmethod
    def save_if_free(self, appointment: Appointment) -> list[str]:
        """
        Insert or replace the appointment unless it overlaps another active appointment
        of the same practitioner. The check and the write happen atomically.
        Returns the conflicting appointment ids; an empty list means it was saved.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, appointment: Appointment) -> None:
        """Insert or replace without a conflict check (status changes, sync ids)."""
        raise NotImplementedError

    @abstractmethod
    def set_calendar_event_id(self, appointment: Appointment, event_id: str | None) -> bool:
        """
        Record the external calendar event of a booking, but only while the stored copy
        is still active and still occupies appointment.start to appointment.end.
        Returns False, and writes nothing, if the booking was cancelled or moved since.
        """
        raise NotImplementedError

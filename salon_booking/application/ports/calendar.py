from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any


class CalendarPort(ABC):
    @abstractmethod
    def create_event(
        self,
        start: datetime,
        end: datetime,
        title: str,
        description: str | None = None,
        attendee_name: str | None = None,
        attendee_email: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """
        Mirror a booking into the external calendar. Returns the event id.
        metadata carries the appointment, practitioner and service keys of the booking.
        """
        raise NotImplementedError

    @abstractmethod
    def cancel_event(self, event_id: str) -> bool:
        """Cancel calendar event. Returns True if successful."""
        raise NotImplementedError

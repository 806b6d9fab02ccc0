from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from salon_booking.application.ports.calendar import CalendarPort


class MockCalendar(CalendarPort):
    """In-process calendar for dev and tests; events live until cancelled."""

    def __init__(self) -> None:
        self._events: dict[str, dict[str, Any]] = {}
        self._counter = 0
        self._logger = logging.getLogger(__name__)

    @property
    def events(self) -> dict[str, dict[str, Any]]:
        return dict(self._events)

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
        self._counter += 1
        event_id = f"mock_event_{self._counter}"
        self._events[event_id] = {
            "start": start,
            "end": end,
            "title": title,
            "description": description,
            "attendee_name": attendee_name,
            "attendee_email": attendee_email,
            "metadata": dict(metadata or {}),
        }
        self._logger.info(
            "Mock calendar event created",
            extra={
                "event_id": event_id,
                "appointment_id": (metadata or {}).get("appointment_id"),
                "start": start.isoformat(),
                "title": title,
            },
        )
        return event_id

    def cancel_event(self, event_id: str) -> bool:
        if self._events.pop(event_id, None) is None:
            return False
        self._logger.info("Mock calendar event cancelled", extra={"event_id": event_id})
        return True

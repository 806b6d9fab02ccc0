from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx

from salon_booking.application.ports.calendar import CalendarPort
from salon_booking.core.config import settings


class CalComCalendar(CalendarPort):
    """
    Mirrors salon bookings into a Cal.com event type (REST API v1).

    Appointment times are naive wall-clock times in the business timezone; they are
    sent to Cal.com with that zone attached. The appointment id, practitioner and
    service keys travel in the booking metadata so the event can be traced back.
    """

    def __init__(
        self,
        api_key: str | None = None,
        event_type_id: int | None = None,
        base_url: str | None = None,
        timezone: str | None = None,
        default_attendee_email: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key or settings.CAL_COM_API_KEY
        self._event_type_id = event_type_id or settings.CAL_COM_EVENT_TYPE_ID
        self._base_url = (base_url or settings.CAL_COM_BASE_URL).rstrip("/")
        self._timezone = timezone or settings.BUSINESS_TIMEZONE
        self._default_attendee_email = default_attendee_email or settings.CAL_COM_DEFAULT_ATTENDEE_EMAIL
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

        if not self._api_key:
            raise ValueError("CAL_COM_API_KEY is required for Cal.com calendar")
        if not self._event_type_id:
            raise ValueError("CAL_COM_EVENT_TYPE_ID is required for Cal.com calendar")

    def _localize(self, value: datetime) -> str:
        if value.tzinfo is None:
            value = value.replace(tzinfo=ZoneInfo(self._timezone))
        return value.isoformat()

    def _booking_payload(
        self,
        start: datetime,
        end: datetime,
        title: str,
        description: str | None,
        attendee_name: str | None,
        attendee_email: str | None,
        metadata: dict[str, Any] | None,
    ) -> dict[str, Any]:
        responses: dict[str, str] = {"name": attendee_name or "Salon client"}
        email = attendee_email or self._default_attendee_email
        if email:
            responses["email"] = email
        if description:
            responses["notes"] = description

        # Cal.com only accepts string metadata values
        flat_metadata = {
            key: ",".join(value) if isinstance(value, (list, tuple)) else str(value)
            for key, value in (metadata or {}).items()
        }
        return {
            "eventTypeId": int(self._event_type_id),
            "start": self._localize(start),
            "end": self._localize(end),
            "timeZone": self._timezone,
            "language": "en",
            "title": title,
            "responses": responses,
            "metadata": flat_metadata,
        }

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
        payload = self._booking_payload(start, end, title, description, attendee_name, attendee_email, metadata)
        appointment_id = (metadata or {}).get("appointment_id")
        try:
            response = self._client.post(
                f"{self._base_url}/bookings",
                params={"apiKey": self._api_key},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            self._logger.error(
                "Cal.com booking request failed",
                extra={"appointment_id": appointment_id, "error": str(e)},
            )
            raise

        booking_id = data.get("id") or data.get("uid")
        if not booking_id:
            raise ValueError("Cal.com response did not include a booking id")

        self._logger.info(
            "Cal.com booking created",
            extra={"appointment_id": appointment_id, "event_id": booking_id},
        )
        return str(booking_id)

    def cancel_event(self, event_id: str) -> bool:
        try:
            response = self._client.delete(
                f"{self._base_url}/bookings/{event_id}/cancel",
                params={"apiKey": self._api_key},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self._logger.error("Cal.com cancellation failed", extra={"event_id": event_id, "error": str(e)})
            return False

        self._logger.info("Cal.com booking cancelled", extra={"event_id": event_id})
        return True

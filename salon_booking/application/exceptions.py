from __future__ import annotations

from datetime import date


class SlotUnavailable(RuntimeError):
    """Raised when a requested start time is taken or is not an offered slot."""

    def __init__(self, message: str, conflicting_appointment_ids: list[str] | None = None) -> None:
        super().__init__(message)
        self.conflicting_appointment_ids = list(conflicting_appointment_ids or [])


class DateNotBookable(RuntimeError):
    """Raised when a date is in the past, outside the booking horizon, or blocked."""

    def __init__(self, target_date: date, reason: str) -> None:
        super().__init__(f"{target_date.isoformat()} is not bookable: {reason}")
        self.target_date = target_date
        self.reason = reason


class UnknownService(LookupError):
    """Raised when a selected service key is not in the catalog."""
    pass


class AppointmentNotFound(LookupError):
    pass


class DateAlreadyBlocked(ValueError):
    """Raised by blocked date stores when the date is already blocked."""
    pass

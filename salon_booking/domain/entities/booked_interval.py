from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from salon_booking.domain.exceptions import InvalidInterval


@dataclass(frozen=True)
class BookedInterval:
    """Half-open [start, end) range occupied by an active appointment."""

    start: datetime
    end: datetime
    appointment_id: str | None = None

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidInterval(
                f"Booked interval must end after it starts: {self.start.isoformat()} >= {self.end.isoformat()}"
            )

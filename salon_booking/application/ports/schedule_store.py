from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.working_window import WorkingWindow


class ScheduleStorePort(ABC):
    @abstractmethod
    def get_week(self, practitioner_id: str) -> list[WorkingWindow]:
        """Get all working windows for a practitioner, ordered by day_of_week."""
        raise NotImplementedError

    @abstractmethod
    def get_window(self, practitioner_id: str, day_of_week: int) -> WorkingWindow | None:
        raise NotImplementedError

    @abstractmethod
    def replace_week(self, practitioner_id: str, windows: list[WorkingWindow]) -> None:
        """Replace the practitioner's whole week. Days missing from windows have no hours."""
        raise NotImplementedError

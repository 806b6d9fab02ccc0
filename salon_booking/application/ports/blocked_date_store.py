from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from salon_booking.domain.entities.blocked_date import BlockedDate


class BlockedDateStorePort(ABC):
    @abstractmethod
    def list_blocked(self, practitioner_id: str) -> list[BlockedDate]:
        """Blocked dates for a practitioner, ascending."""
        raise NotImplementedError

    @abstractmethod
    def add(self, practitioner_id: str, blocked: BlockedDate) -> None:
        """Persist one blocked date. Raises DateAlreadyBlocked if the date is already blocked."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, practitioner_id: str, blocked_date: date) -> bool:
        """Returns True if the date was blocked."""
        raise NotImplementedError

    def dates(self, practitioner_id: str) -> set[date]:
        return {item.blocked_date for item in self.list_blocked(practitioner_id)}

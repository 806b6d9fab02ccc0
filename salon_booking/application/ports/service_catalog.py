from __future__ import annotations

from abc import ABC, abstractmethod

from salon_booking.domain.entities.service_catalog import ServiceCatalogEntry


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        """Get service catalog entry by service key."""
        raise NotImplementedError

    @abstractmethod
    def list_services(self) -> list[ServiceCatalogEntry]:
        raise NotImplementedError

    @abstractmethod
    def get_duration_minutes(self, service_key: str) -> int:
        """Get service duration in minutes. Raises UnknownService if not found."""
        raise NotImplementedError

from __future__ import annotations

from salon_booking.application.exceptions import UnknownService
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.domain.entities.service_catalog import ServiceCatalogEntry
from salon_booking.infrastructure.catalog.service_catalog_data import SERVICE_CATALOG


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, ServiceCatalogEntry] | None = None) -> None:
        self._catalog = catalog or SERVICE_CATALOG

    def get_service(self, service_key: str) -> ServiceCatalogEntry | None:
        normalized_key = service_key.lower().strip()
        return self._catalog.get(normalized_key)

    def list_services(self) -> list[ServiceCatalogEntry]:
        return sorted(self._catalog.values(), key=lambda entry: (entry.category, entry.display_name))

    def get_duration_minutes(self, service_key: str) -> int:
        entry = self.get_service(service_key)
        if not entry:
            raise UnknownService(f"Unknown service: {service_key}")
        return entry.duration_minutes

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceCatalogEntry:
    service_key: str
    display_name: str
    category: str
    price: int | None
    duration_minutes: int
    notes: str | None = None

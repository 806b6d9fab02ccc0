from __future__ import annotations

from salon_booking.domain.entities.service_catalog import ServiceCatalogEntry


def _entry(
    service_key: str,
    display_name: str,
    category: str,
    price: int | None,
    duration_minutes: int,
    notes: str | None = None,
) -> tuple[str, ServiceCatalogEntry]:
    return service_key, ServiceCatalogEntry(
        service_key=service_key,
        display_name=display_name,
        category=category,
        price=price,
        duration_minutes=duration_minutes,
        notes=notes,
    )


SERVICE_CATALOG: dict[str, ServiceCatalogEntry] = dict(
    [
        _entry("haircut_women", "Women's Haircut", "hair", 55, 45),
        _entry("haircut_men", "Men's Haircut", "hair", 35, 30),
        _entry("blow_dry", "Blow Dry & Style", "hair", 40, 30),
        _entry("root_color", "Root Color", "color", 85, 90),
        _entry("full_highlights", "Full Highlights", "color", 160, 150, notes="Includes toner"),
        _entry("classic_manicure", "Classic Manicure", "nails", 30, 30),
        _entry("gel_manicure", "Gel Manicure", "nails", 45, 45),
        _entry("pedicure", "Spa Pedicure", "nails", 55, 60),
        _entry("brow_shaping", "Brow Shaping", "brows_lashes", 25, 15),
        _entry("lash_lift", "Lash Lift & Tint", "brows_lashes", 75, 60),
        _entry("signature_facial", "Signature Facial", "skin", 95, 60),
        _entry("express_facial", "Express Facial", "skin", 60, 30),
    ]
)

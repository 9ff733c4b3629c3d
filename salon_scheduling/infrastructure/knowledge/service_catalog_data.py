from __future__ import annotations

from decimal import Decimal

from salon_scheduling.domain.entities.service_catalog import ServiceCatalogEntry


def _entry(service_id: str, name: str, category: str, minutes: int, price: str) -> ServiceCatalogEntry:
    return ServiceCatalogEntry(
        service_id=service_id,
        name=name,
        category=category,
        duration_minutes=minutes,
        base_price=Decimal(price),
    )


SERVICE_CATALOG: dict[str, ServiceCatalogEntry] = {
    entry.service_id: entry
    for entry in (
        # Ladies
        _entry("ladies-blow-dry-long", "Blow Dry (Long)", "Ladies", 45, "32.00"),
        _entry("ladies-blow-dry-medium", "Blow Dry (Medium)", "Ladies", 40, "30.00"),
        _entry("ladies-blow-dry-short", "Blow Dry (Short)", "Ladies", 30, "28.00"),
        _entry("ladies-cut-blow-dry", "Cut & Blow Dry", "Ladies", 60, "53.00"),
        _entry("ladies-shampoo-set", "Shampoo & Set", "Ladies", 30, "28.00"),
        _entry("ladies-wash-cut", "Wash & Cut", "Ladies", 45, "35.00"),
        _entry("ladies-upstyles", "Upstyles", "Ladies", 60, "48.00"),
        _entry("ladies-ghd-curls", "GHD Curls", "Ladies", 45, "38.00"),
        # Colours
        _entry("colours-tint-cut-semi", "Tint, Cut & Semi", "Colours", 150, "96.00"),
        _entry("colours-tint-cut", "Tint & Cut", "Colours", 135, "93.00"),
        _entry("colours-tint-blow-dry", "Tint & Blow Dry", "Colours", 120, "79.00"),
        _entry("colours-balayage-full", "Couture Colour Balayage (Full)", "Colours", 210, "160.00"),
        _entry("colours-balayage-half", "Couture Colour Balayage (Half)", "Colours", 150, "130.00"),
        # Highlights
        _entry("highlights-full-head-cut-long", "Full Head & Cut (Long)", "Highlights", 180, "156.00"),
        _entry("highlights-half-head-cut", "Half Head & Cut", "Highlights", 120, "122.00"),
        _entry("highlights-t-bar-cut", "T-Bar & Cut", "Highlights", 90, "96.00"),
        # Gents, students, children
        _entry("gents-wash-cut", "Wash & Cut", "Gents", 30, "24.00"),
        _entry("students-cut-blow-dry", "Student Cut & Blow Dry", "Students", 45, "43.00"),
        _entry("students-wash-cut", "Student Wash & Cut", "Students", 30, "28.00"),
        _entry("children-wash-cut", "Wash & Cut", "Children", 30, "26.00"),
        _entry("children-cut-blow-dry", "Cut & Blow Dry", "Children", 45, "37.00"),
        # OAP
        _entry("oap-perm", "Perm", "OAP", 120, "92.00"),
        _entry("oap-shampoo-set", "Shampoo & Set", "OAP", 30, "26.50"),
        _entry("oap-blow-dry", "Blow Dry", "OAP", 30, "26.50"),
    )
}

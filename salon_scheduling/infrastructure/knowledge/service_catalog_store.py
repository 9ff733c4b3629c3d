from __future__ import annotations

import threading
from dataclasses import replace
from decimal import Decimal

from salon_scheduling.application.ports.service_catalog import ServiceCatalogPort
from salon_scheduling.domain.entities.service_catalog import ServiceCatalogEntry, ServicePrice
from salon_scheduling.infrastructure.knowledge.service_catalog_data import SERVICE_CATALOG


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, ServiceCatalogEntry] | None = None) -> None:
        self._catalog = dict(SERVICE_CATALOG if catalog is None else catalog)
        self._lock = threading.Lock()

    def get_service(self, service_id: str) -> ServiceCatalogEntry | None:
        with self._lock:
            return self._catalog.get(service_id.strip())

    def get_service_price(self, service_id: str) -> ServicePrice | None:
        entry = self.get_service(service_id)
        if not entry:
            return None
        return ServicePrice(price=entry.base_price, duration_minutes=entry.duration_minutes)

    def list_services(self, category: str | None = None, active: bool | None = None) -> list[ServiceCatalogEntry]:
        with self._lock:
            entries = list(self._catalog.values())
        return sorted(
            (
                e
                for e in entries
                if (category is None or e.category == category) and (active is None or e.active == active)
            ),
            key=lambda e: (e.category, e.name),
        )

    def update_service(
        self,
        service_id: str,
        base_price: Decimal | None = None,
        duration_minutes: int | None = None,
        active: bool | None = None,
    ) -> ServiceCatalogEntry:
        """Change catalog values. Already-booked appointments keep their snapshot."""
        with self._lock:
            entry = self._catalog.get(service_id)
            if entry is None:
                raise KeyError(service_id)
            updated = replace(
                entry,
                base_price=entry.base_price if base_price is None else base_price,
                duration_minutes=entry.duration_minutes if duration_minutes is None else duration_minutes,
                active=entry.active if active is None else active,
            )
            self._catalog[service_id] = updated
            return updated

    def remove_service(self, service_id: str) -> bool:
        with self._lock:
            return self._catalog.pop(service_id, None) is not None

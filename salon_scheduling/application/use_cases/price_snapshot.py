from __future__ import annotations

from collections.abc import Sequence

from salon_scheduling.application.exceptions import UnknownServiceError
from salon_scheduling.application.ports.service_catalog import ServiceCatalogPort
from salon_scheduling.domain.entities.appointment import LineItem


class PriceSnapshotResolver:
    """Freezes current catalog prices into line items at booking time."""

    def __init__(self, catalog: ServiceCatalogPort) -> None:
        self._catalog = catalog

    def snapshot_line_items(self, service_ids: Sequence[str]) -> tuple[LineItem, ...]:
        """
        One line item per requested id, in request order.
        All-or-nothing: any unresolved id fails the whole snapshot.
        """
        items: list[LineItem] = []
        missing: list[str] = []
        for service_id in service_ids:
            quote = self._catalog.get_service_price(service_id)
            if quote is None:
                missing.append(service_id)
                continue
            items.append(
                LineItem(service_id=service_id, price=quote.price, duration_minutes=quote.duration_minutes)
            )

        if missing:
            raise UnknownServiceError(missing)
        return tuple(items)

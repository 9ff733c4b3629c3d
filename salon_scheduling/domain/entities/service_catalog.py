from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ServiceCatalogEntry:
    service_id: str
    name: str
    category: str
    duration_minutes: int
    base_price: Decimal
    active: bool = True
    notes: str | None = None


@dataclass(frozen=True)
class ServicePrice:
    price: Decimal
    duration_minutes: int

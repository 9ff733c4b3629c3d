from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from salon_scheduling.domain.entities.time_interval import TimeInterval


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Cancelled and no-show appointments keep their interval but free the slot.
INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})


@dataclass(frozen=True)
class LineItem:
    service_id: str
    price: Decimal  # frozen at booking time
    duration_minutes: int


@dataclass(frozen=True)
class Appointment:
    id: str
    client_id: str
    provider_id: str
    scheduled: TimeInterval
    line_items: tuple[LineItem, ...]
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: str | None = None
    cancellation_reason: str | None = None
    actual_start: datetime | None = None
    actual_end: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def service_ids(self) -> tuple[str, ...]:
        return tuple(item.service_id for item in self.line_items)

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator

from salon_scheduling.core.config import settings
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, LineItem
from salon_scheduling.domain.entities.time_interval import TimeInterval


def localize(value: datetime | None) -> datetime | None:
    """Interpret naive datetimes in the business timezone."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=ZoneInfo(settings.BUSINESS_TIMEZONE))


class LocalizedModel(BaseModel):
    @field_validator("*", mode="after")
    @classmethod
    def _localize_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return localize(value)
        return value


class LineItemSchema(BaseModel):
    service_id: str
    price: Decimal
    duration_minutes: int


class AppointmentSchema(LocalizedModel):
    id: str
    client_id: str
    provider_id: str
    start: datetime
    end: datetime
    status: AppointmentStatus
    line_items: list[LineItemSchema]
    notes: str | None = None
    cancellation_reason: str | None = None
    actual_start: datetime | None = None
    actual_end: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, appointment: Appointment) -> AppointmentSchema:
        return cls(
            id=appointment.id,
            client_id=appointment.client_id,
            provider_id=appointment.provider_id,
            start=appointment.scheduled.start,
            end=appointment.scheduled.end,
            status=appointment.status,
            line_items=[
                LineItemSchema(
                    service_id=item.service_id,
                    price=item.price,
                    duration_minutes=item.duration_minutes,
                )
                for item in appointment.line_items
            ],
            notes=appointment.notes,
            cancellation_reason=appointment.cancellation_reason,
            actual_start=appointment.actual_start,
            actual_end=appointment.actual_end,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )

    def to_domain(self) -> Appointment:
        return Appointment(
            id=self.id,
            client_id=self.client_id,
            provider_id=self.provider_id,
            scheduled=TimeInterval(start=self.start, end=self.end),
            line_items=tuple(
                LineItem(service_id=i.service_id, price=i.price, duration_minutes=i.duration_minutes)
                for i in self.line_items
            ),
            status=self.status,
            notes=self.notes,
            cancellation_reason=self.cancellation_reason,
            actual_start=self.actual_start,
            actual_end=self.actual_end,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CreateAppointmentRequestSchema(LocalizedModel):
    client_id: str
    provider_id: str
    start: datetime
    end: datetime | None = None  # derived from service durations when omitted
    service_ids: list[str] = Field(default_factory=list)
    notes: str | None = None


class RescheduleRequestSchema(LocalizedModel):
    start: datetime
    end: datetime
    provider_id: str | None = None


class StatusChangeRequestSchema(BaseModel):
    status: AppointmentStatus
    reason: str | None = None


class CancelRequestSchema(BaseModel):
    reason: str


class UpdateDetailsRequestSchema(LocalizedModel):
    notes: str | None = None
    actual_start: datetime | None = None
    actual_end: datetime | None = None

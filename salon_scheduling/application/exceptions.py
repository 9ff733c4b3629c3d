from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus
    from salon_scheduling.domain.entities.time_interval import TimeInterval


class SchedulingError(Exception):
    """Base for expected, typed outcomes returned to the caller."""

    code = "scheduling_error"


class ConflictError(SchedulingError):
    """Raised when a proposed interval overlaps an active commitment of the provider."""

    code = "conflict"

    def __init__(
        self,
        conflicting_appointment_id: str,
        provider_id: str,
        conflicting_interval: "TimeInterval",
    ) -> None:
        self.conflicting_appointment_id = conflicting_appointment_id
        self.provider_id = provider_id
        self.conflicting_interval = conflicting_interval
        super().__init__(
            f"Provider {provider_id} is already booked from "
            f"{conflicting_interval.start.isoformat()} to {conflicting_interval.end.isoformat()} "
            f"(appointment {conflicting_appointment_id})"
        )

    @classmethod
    def from_appointment(cls, appointment: "Appointment") -> "ConflictError":
        return cls(appointment.id, appointment.provider_id, appointment.scheduled)


class InvalidTransitionError(SchedulingError):
    """Raised when a status change is not permitted from the current status."""

    code = "invalid_transition"

    def __init__(self, current: "AppointmentStatus", target: "AppointmentStatus") -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move appointment from {current.value} to {target.value}")


class NotEditableError(SchedulingError):
    code = "not_editable"

    def __init__(self, appointment_id: str, status: "AppointmentStatus") -> None:
        self.appointment_id = appointment_id
        self.status = status
        super().__init__(f"Appointment {appointment_id} is {status.value} and can no longer be edited")


class AppointmentNotFoundError(SchedulingError, LookupError):
    code = "not_found"

    def __init__(self, appointment_id: str) -> None:
        self.appointment_id = appointment_id
        super().__init__(f"Appointment {appointment_id} not found")


class UnknownServiceError(SchedulingError, LookupError):
    code = "unknown_service"

    def __init__(self, service_ids: Iterable[str]) -> None:
        self.service_ids = tuple(service_ids)
        super().__init__(f"Unknown service id(s): {', '.join(self.service_ids)}")


class InvalidIntervalError(SchedulingError, ValueError):
    code = "invalid_interval"

    def __init__(self, start: datetime | None, end: datetime | None, message: str | None = None) -> None:
        self.start = start
        self.end = end
        super().__init__(message or f"Interval start {start} must be before end {end}")


class BookingValidationError(SchedulingError, ValueError):
    """Raised when a request is missing required input (e.g. no services)."""

    code = "validation_error"


class CommitmentStoreError(RuntimeError):
    """Raised when the commitment store cannot be read or written."""

    code = "store_unavailable"

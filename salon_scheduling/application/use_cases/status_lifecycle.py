"""
Appointment status state machine.

Legal moves live in one table of (from, to) pairs; everything not listed is
rejected with InvalidTransitionError. COMPLETED, CANCELLED and NO_SHOW are
terminal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from salon_scheduling.application.exceptions import (
    BookingValidationError,
    InvalidTransitionError,
    NotEditableError,
)
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.application.utils.locking import locked_appointment
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus

S = AppointmentStatus

ALLOWED_TRANSITIONS: frozenset[tuple[AppointmentStatus, AppointmentStatus]] = frozenset(
    {
        (S.SCHEDULED, S.CONFIRMED),
        (S.SCHEDULED, S.IN_PROGRESS),
        (S.CONFIRMED, S.IN_PROGRESS),
        (S.SCHEDULED, S.COMPLETED),
        (S.CONFIRMED, S.COMPLETED),
        (S.IN_PROGRESS, S.COMPLETED),
        (S.SCHEDULED, S.CANCELLED),
        (S.CONFIRMED, S.CANCELLED),
        (S.IN_PROGRESS, S.CANCELLED),
        (S.SCHEDULED, S.NO_SHOW),
        (S.CONFIRMED, S.NO_SHOW),
    }
)

TERMINAL_STATUSES = frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW})
EDITABLE_STATUSES = frozenset({S.SCHEDULED, S.CONFIRMED, S.IN_PROGRESS})


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return (current, target) in ALLOWED_TRANSITIONS


def allowed_targets(current: AppointmentStatus) -> list[AppointmentStatus]:
    return [status for status in AppointmentStatus if (current, status) in ALLOWED_TRANSITIONS]


def ensure_editable(appointment: Appointment) -> None:
    if appointment.status not in EDITABLE_STATUSES:
        raise NotEditableError(appointment.id, appointment.status)


@dataclass(frozen=True)
class TransitionContext:
    now: datetime
    reason: str | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StatusLifecycleManager:
    def __init__(
        self,
        store: CommitmentStorePort,
        clock: Callable[[], datetime] = _utcnow,
        lock_attempts: int = 5,
    ) -> None:
        self._store = store
        self._clock = clock
        self._lock_attempts = lock_attempts
        self._logger = logging.getLogger(__name__)

    def apply(
        self,
        appointment: Appointment,
        target: AppointmentStatus,
        context: TransitionContext,
    ) -> Appointment:
        """Return the appointment moved to `target`. Does not persist."""
        if not can_transition(appointment.status, target):
            raise InvalidTransitionError(appointment.status, target)

        changes: dict[str, object] = {"status": target, "updated_at": context.now}
        if target == S.CANCELLED:
            if context.reason is None:
                raise BookingValidationError("A cancellation reason is required (it may be empty)")
            changes["cancellation_reason"] = context.reason
        elif target == S.IN_PROGRESS and appointment.actual_start is None:
            changes["actual_start"] = context.now
        elif target == S.COMPLETED and appointment.actual_end is None:
            # A recorded start at or after now leaves the end for update_details.
            if appointment.actual_start is None or appointment.actual_start < context.now:
                changes["actual_end"] = context.now

        # The scheduled interval is kept as history; inactive statuses free the slot.
        return replace(appointment, **changes)

    def transition(
        self,
        appointment_id: str,
        target: AppointmentStatus,
        reason: str | None = None,
    ) -> Appointment:
        with locked_appointment(self._store, appointment_id, attempts=self._lock_attempts) as current:
            updated = self.apply(current, target, TransitionContext(now=self._clock(), reason=reason))
            saved = self._store.save(updated)

        self._logger.info(
            "Appointment status changed",
            extra={
                "appointment_id": appointment_id,
                "status": current.status.value,
                "target_status": target.value,
            },
        )
        return saved

    def cancel(self, appointment_id: str, reason: str) -> Appointment:
        return self.transition(appointment_id, S.CANCELLED, reason=reason)

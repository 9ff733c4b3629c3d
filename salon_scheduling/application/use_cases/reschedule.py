"""
Moves, resizes and reassigns appointments.

Resizing (new end only) and reassignment (new provider only) are just
reschedules with the other fields unchanged. The conflict check and the write
happen under the provider locks of both the current and the target provider,
so two concurrent operations cannot both claim an overlapping slot.

Interactive callers that already moved the appointment on screen rely on the
typed failures (ConflictError, NotEditableError, AppointmentNotFoundError,
InvalidIntervalError) to revert, and on the returned appointment to reconcile.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from salon_scheduling.application.exceptions import ConflictError
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.application.use_cases.conflict_detection import ConflictDetector
from salon_scheduling.application.use_cases.status_lifecycle import ensure_editable
from salon_scheduling.application.utils.intervals import ensure_valid_interval
from salon_scheduling.application.utils.locking import locked_appointment
from salon_scheduling.domain.entities.appointment import Appointment
from salon_scheduling.domain.entities.time_interval import TimeInterval


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RescheduleCoordinator:
    def __init__(
        self,
        store: CommitmentStorePort,
        clock: Callable[[], datetime] = _utcnow,
        lock_attempts: int = 5,
    ) -> None:
        self._store = store
        self._detector = ConflictDetector(store)
        self._clock = clock
        self._lock_attempts = lock_attempts
        self._logger = logging.getLogger(__name__)

    def reschedule(
        self,
        appointment_id: str,
        new_interval: TimeInterval,
        new_provider_id: str | None = None,
    ) -> Appointment:
        ensure_valid_interval(new_interval)
        extra_providers = (new_provider_id,) if new_provider_id else ()

        with locked_appointment(
            self._store, appointment_id, *extra_providers, attempts=self._lock_attempts
        ) as current:
            ensure_editable(current)
            provider_id = new_provider_id or current.provider_id

            conflict = self._detector.find_conflict(
                provider_id, new_interval, exclude_appointment_id=current.id
            )
            if conflict is not None:
                self._logger.info(
                    "Reschedule rejected: slot taken",
                    extra={
                        "appointment_id": appointment_id,
                        "provider_id": provider_id,
                        "conflict_id": conflict.id,
                    },
                )
                raise ConflictError.from_appointment(conflict)

            updated = replace(
                current,
                provider_id=provider_id,
                scheduled=new_interval,
                updated_at=self._clock(),
            )
            saved = self._store.save(updated)

        self._logger.info(
            "Appointment rescheduled",
            extra={"appointment_id": appointment_id, "provider_id": provider_id},
        )
        return saved


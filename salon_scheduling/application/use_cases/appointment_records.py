from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from salon_scheduling.application.exceptions import (
    AppointmentNotFoundError,
    InvalidIntervalError,
    NotEditableError,
)
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.application.utils.intervals import ensure_aware
from salon_scheduling.application.utils.locking import locked_appointment
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus

# Actual times only make sense once work has begun.
_ACTUAL_TIME_STATUSES = frozenset({AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED})

_UNSET = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppointmentRecordsUseCase:
    """Reads, non-scheduling edits and administrative deletes."""

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

    def get(self, appointment_id: str) -> Appointment:
        appointment = self._store.get(appointment_id)
        if appointment is None:
            raise AppointmentNotFoundError(appointment_id)
        return appointment

    def list_appointments(
        self,
        provider_id: str | None = None,
        client_id: str | None = None,
        status: AppointmentStatus | None = None,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> list[Appointment]:
        return self._store.list_appointments(
            provider_id=provider_id,
            client_id=client_id,
            status=status,
            window_start=window_start,
            window_end=window_end,
        )

    def update_details(
        self,
        appointment_id: str,
        notes: str | None | object = _UNSET,
        actual_start: datetime | None | object = _UNSET,
        actual_end: datetime | None | object = _UNSET,
    ) -> Appointment:
        """
        Edit notes and recorded actual times. Omitted arguments are left alone;
        passing None clears the field.
        """
        with locked_appointment(self._store, appointment_id, attempts=self._lock_attempts) as current:
            changes: dict[str, object] = {}
            if notes is not _UNSET:
                changes["notes"] = notes

            if actual_start is not _UNSET or actual_end is not _UNSET:
                if current.status not in _ACTUAL_TIME_STATUSES:
                    raise NotEditableError(current.id, current.status)
                start = current.actual_start if actual_start is _UNSET else actual_start
                end = current.actual_end if actual_end is _UNSET else actual_end
                ensure_aware(start, end)
                if start is not None and end is not None and not start < end:
                    raise InvalidIntervalError(start, end)
                changes["actual_start"] = start
                changes["actual_end"] = end

            if not changes:
                return current

            changes["updated_at"] = self._clock()
            saved = self._store.save(replace(current, **changes))

        self._logger.info("Appointment details updated", extra={"appointment_id": appointment_id})
        return saved

    def delete(self, appointment_id: str) -> None:
        """Administrative removal. Bypasses the status state machine."""
        with locked_appointment(self._store, appointment_id, attempts=self._lock_attempts):
            self._store.delete(appointment_id)

        self._logger.info("Appointment deleted", extra={"appointment_id": appointment_id})

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from datetime import datetime

from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus


class MemoryCommitmentStore(CommitmentStorePort):
    def __init__(self) -> None:
        self._appointments: dict[str, Appointment] = {}
        self._data_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict

    def _get_lock(self, provider_id: str) -> threading.Lock:
        """Get or create a lock for a provider_id."""
        with self._lock_lock:
            if provider_id not in self._locks:
                self._locks[provider_id] = threading.Lock()
            return self._locks[provider_id]

    @contextmanager
    def provider_lock(self, *provider_ids: str) -> Iterator[None]:
        # Sorted acquisition keeps two-provider reschedules deadlock free.
        with ExitStack() as stack:
            for provider_id in sorted(set(provider_ids)):
                stack.enter_context(self._get_lock(provider_id))
            yield

    def get(self, appointment_id: str) -> Appointment | None:
        with self._data_lock:
            return self._appointments.get(appointment_id)

    def save(self, appointment: Appointment) -> Appointment:
        with self._data_lock:
            self._appointments[appointment.id] = appointment
        return appointment

    def delete(self, appointment_id: str) -> bool:
        with self._data_lock:
            return self._appointments.pop(appointment_id, None) is not None

    def list_active_commitments(self, provider_id: str) -> list[Appointment]:
        with self._data_lock:
            matches = [a for a in self._appointments.values() if a.provider_id == provider_id and a.is_active]
        return sorted(matches, key=_start_key)

    def list_appointments(
        self,
        provider_id: str | None = None,
        client_id: str | None = None,
        status: AppointmentStatus | None = None,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> list[Appointment]:
        with self._data_lock:
            snapshot = list(self._appointments.values())
        matches = [
            a
            for a in snapshot
            if matches_filters(a, provider_id, client_id, status, window_start, window_end)
        ]
        return sorted(matches, key=_start_key)


def matches_filters(
    appointment: Appointment,
    provider_id: str | None,
    client_id: str | None,
    status: AppointmentStatus | None,
    window_start: datetime | None,
    window_end: datetime | None,
) -> bool:
    if provider_id is not None and appointment.provider_id != provider_id:
        return False
    if client_id is not None and appointment.client_id != client_id:
        return False
    if status is not None and appointment.status != status:
        return False
    if window_start is not None and appointment.scheduled.end <= window_start:
        return False
    if window_end is not None and appointment.scheduled.start >= window_end:
        return False
    return True


def _start_key(appointment: Appointment) -> tuple[datetime, str]:
    return (appointment.scheduled.start, appointment.id)

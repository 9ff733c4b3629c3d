from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from salon_scheduling.application.exceptions import AppointmentNotFoundError, CommitmentStoreError
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.domain.entities.appointment import Appointment


@contextmanager
def locked_appointment(
    store: CommitmentStorePort,
    appointment_id: str,
    *extra_provider_ids: str,
    attempts: int = 5,
) -> Iterator[Appointment]:
    """
    Hold the appointment's provider lock (plus any extra providers) and yield a
    fresh copy read under that lock.

    The provider is only known after a read, so the record is re-read once the
    lock is held; if another writer reassigned it in between, try again.
    """
    for _ in range(attempts):
        current = store.get(appointment_id)
        if current is None:
            raise AppointmentNotFoundError(appointment_id)

        with store.provider_lock(current.provider_id, *extra_provider_ids):
            fresh = store.get(appointment_id)
            if fresh is None:
                raise AppointmentNotFoundError(appointment_id)
            if fresh.provider_id == current.provider_id:
                yield fresh
                return

    raise CommitmentStoreError(
        f"Appointment {appointment_id} was reassigned concurrently {attempts} times; giving up"
    )

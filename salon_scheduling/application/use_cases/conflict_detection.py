from __future__ import annotations

from collections.abc import Iterable

from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.domain.entities.appointment import Appointment
from salon_scheduling.domain.entities.time_interval import TimeInterval


def find_conflict(
    provider_id: str,
    proposed: TimeInterval,
    commitments: Iterable[Appointment],
    exclude_appointment_id: str | None = None,
) -> Appointment | None:
    """
    Return the earliest-starting active commitment of `provider_id` that overlaps
    `proposed`, or None. Pure: the caller supplies the commitments.
    """
    conflicts = [
        appointment
        for appointment in commitments
        if appointment.provider_id == provider_id
        and appointment.is_active
        and appointment.id != exclude_appointment_id
        and appointment.scheduled.overlaps(proposed)
    ]
    if not conflicts:
        return None
    return min(conflicts, key=lambda a: (a.scheduled.start, a.id))


class ConflictDetector:
    def __init__(self, store: CommitmentStorePort) -> None:
        self._store = store

    def find_conflict(
        self,
        provider_id: str,
        proposed: TimeInterval,
        exclude_appointment_id: str | None = None,
    ) -> Appointment | None:
        """Read-only. Callers that write on a None result must hold the provider lock."""
        commitments = self._store.list_active_commitments(provider_id)
        return find_conflict(provider_id, proposed, commitments, exclude_appointment_id)

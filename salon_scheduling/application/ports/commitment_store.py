from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus


class CommitmentStorePort(ABC):
    @abstractmethod
    def get(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, appointment: Appointment) -> Appointment:
        """
        Insert or replace an appointment, moving it between providers if needed.
        Must be called inside provider_lock() for every provider the write touches.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, appointment_id: str) -> bool:
        """Remove an appointment. Returns False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def list_active_commitments(self, provider_id: str) -> list[Appointment]:
        """Provider's appointments not CANCELLED or NO_SHOW, ordered by scheduled start."""
        raise NotImplementedError

    @abstractmethod
    def list_appointments(
        self,
        provider_id: str | None = None,
        client_id: str | None = None,
        status: AppointmentStatus | None = None,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> list[Appointment]:
        """Filtered appointments ordered by scheduled start. The window matches by overlap."""
        raise NotImplementedError

    @abstractmethod
    def provider_lock(self, *provider_ids: str) -> AbstractContextManager[None]:
        """
        Mutual exclusion over the given providers' schedules.
        Conflict check and write for a provider must both happen while this is held.
        """
        raise NotImplementedError

"""
Caller-side optimistic rescheduling.

A calendar moves an appointment on screen as soon as it is dragged, then asks
the server. On success the server's copy replaces the local one (it may
differ, e.g. after snapping). On any failure the appointment goes back to its
last confirmed placement.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime

from salon_scheduling.application.exceptions import SchedulingError
from salon_scheduling.client.scheduling_client import SchedulingClient
from salon_scheduling.domain.entities.appointment import Appointment
from salon_scheduling.domain.entities.time_interval import TimeInterval


@dataclass(frozen=True)
class RescheduleOutcome:
    appointment: Appointment  # what the view shows after the call
    accepted: bool
    error: SchedulingError | None = None


class OptimisticSchedule:
    def __init__(self, client: SchedulingClient, appointments: Iterable[Appointment] = ()) -> None:
        self._client = client
        self._confirmed: dict[str, Appointment] = {}
        self._shown: dict[str, Appointment] = {}
        self._logger = logging.getLogger(__name__)
        self.load(appointments)

    def load(self, appointments: Iterable[Appointment]) -> None:
        for appointment in appointments:
            self._confirmed[appointment.id] = appointment
            self._shown[appointment.id] = appointment

    def shown(self, appointment_id: str) -> Appointment:
        return self._shown[appointment_id]

    def confirmed(self, appointment_id: str) -> Appointment:
        return self._confirmed[appointment_id]

    def is_pending(self, appointment_id: str) -> bool:
        return self._shown[appointment_id] != self._confirmed[appointment_id]

    def move(
        self,
        appointment_id: str,
        new_interval: TimeInterval,
        new_provider_id: str | None = None,
    ) -> RescheduleOutcome:
        known_good = self._confirmed[appointment_id]
        self._shown[appointment_id] = replace(
            known_good,
            scheduled=new_interval,
            provider_id=new_provider_id or known_good.provider_id,
        )

        try:
            authoritative = self._client.reschedule_appointment(
                appointment_id, new_interval, new_provider_id=new_provider_id
            )
        except SchedulingError as e:
            self._revert(appointment_id)
            self._logger.info(
                "Reverted tentative move",
                extra={"appointment_id": appointment_id, "error": e.code},
            )
            return RescheduleOutcome(appointment=known_good, accepted=False, error=e)
        except Exception:
            # Transport failure: the server may or may not have applied it; refresh() tells.
            self._revert(appointment_id)
            raise

        self._confirmed[appointment_id] = authoritative
        self._shown[appointment_id] = authoritative
        return RescheduleOutcome(appointment=authoritative, accepted=True)

    def resize(self, appointment_id: str, new_end: datetime) -> RescheduleOutcome:
        current = self._confirmed[appointment_id]
        return self.move(appointment_id, current.scheduled.with_end(new_end))

    def refresh(self, appointment_id: str) -> Appointment:
        """Re-read the authoritative copy from the server."""
        appointment = self._client.get_appointment(appointment_id)
        self._confirmed[appointment_id] = appointment
        self._shown[appointment_id] = appointment
        return appointment

    def _revert(self, appointment_id: str) -> None:
        self._shown[appointment_id] = self._confirmed[appointment_id]

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from salon_scheduling.application.exceptions import BookingValidationError, ConflictError
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.application.use_cases.conflict_detection import ConflictDetector
from salon_scheduling.application.use_cases.price_snapshot import PriceSnapshotResolver
from salon_scheduling.application.utils.intervals import ensure_valid_interval, interval_for_services
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, LineItem
from salon_scheduling.domain.entities.time_interval import TimeInterval


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_appointment_id() -> str:
    return str(uuid.uuid4())


class CreateAppointmentUseCase:
    def __init__(
        self,
        store: CommitmentStorePort,
        snapshot: PriceSnapshotResolver,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_appointment_id,
    ) -> None:
        self._store = store
        self._snapshot = snapshot
        self._detector = ConflictDetector(store)
        self._clock = clock
        self._id_factory = id_factory
        self._logger = logging.getLogger(__name__)

    def execute(
        self,
        client_id: str,
        provider_id: str,
        interval: TimeInterval,
        service_ids: Sequence[str],
        notes: str | None = None,
    ) -> Appointment:
        self._validate_request(client_id, provider_id, service_ids)
        ensure_valid_interval(interval)
        line_items = self._snapshot.snapshot_line_items(service_ids)
        return self._book(client_id, provider_id, interval, line_items, notes)

    def execute_from_start(
        self,
        client_id: str,
        provider_id: str,
        start: datetime,
        service_ids: Sequence[str],
        notes: str | None = None,
    ) -> Appointment:
        """Book from `start` for the combined duration of the requested services."""
        self._validate_request(client_id, provider_id, service_ids)
        line_items = self._snapshot.snapshot_line_items(service_ids)
        interval = interval_for_services(start, line_items)
        return self._book(client_id, provider_id, interval, line_items, notes)

    def _validate_request(self, client_id: str, provider_id: str, service_ids: Sequence[str]) -> None:
        if not client_id or not client_id.strip():
            raise BookingValidationError("Client ID is required")
        if not provider_id or not provider_id.strip():
            raise BookingValidationError("Provider ID is required")
        if not service_ids:
            raise BookingValidationError("At least one service is required")

    def _book(
        self,
        client_id: str,
        provider_id: str,
        interval: TimeInterval,
        line_items: tuple[LineItem, ...],
        notes: str | None,
    ) -> Appointment:
        with self._store.provider_lock(provider_id):
            conflict = self._detector.find_conflict(provider_id, interval)
            if conflict is not None:
                self._logger.info(
                    "Booking rejected: slot taken",
                    extra={"provider_id": provider_id, "conflict_id": conflict.id},
                )
                raise ConflictError.from_appointment(conflict)

            now = self._clock()
            appointment = Appointment(
                id=self._id_factory(),
                client_id=client_id,
                provider_id=provider_id,
                scheduled=interval,
                line_items=line_items,
                status=AppointmentStatus.SCHEDULED,
                notes=notes,
                created_at=now,
                updated_at=now,
            )
            saved = self._store.save(appointment)

        self._logger.info(
            "Appointment created",
            extra={"appointment_id": saved.id, "provider_id": provider_id, "client_id": client_id},
        )
        return saved

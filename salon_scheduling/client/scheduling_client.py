from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import httpx

from salon_scheduling.api.v1.schemas import AppointmentSchema
from salon_scheduling.application.exceptions import (
    AppointmentNotFoundError,
    BookingValidationError,
    CommitmentStoreError,
    ConflictError,
    InvalidIntervalError,
    InvalidTransitionError,
    NotEditableError,
    UnknownServiceError,
)
from salon_scheduling.core.config import settings
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus
from salon_scheduling.domain.entities.time_interval import TimeInterval

API_PREFIX = "/api/v1/appointments"


class SchedulingClient:
    """HTTP client for the scheduling API that raises the same typed errors as the core."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url or settings.SCHEDULING_API_BASE_URL,
            timeout=timeout or settings.SCHEDULING_API_TIMEOUT,
        )
        self._logger = logging.getLogger(__name__)

    def close(self) -> None:
        self._client.close()

    def get_appointment(self, appointment_id: str) -> Appointment:
        response = self._client.get(f"{API_PREFIX}/{appointment_id}")
        return self._parse(response, appointment_id=appointment_id)

    def list_appointments(
        self,
        provider_id: str | None = None,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> list[Appointment]:
        params: dict[str, str] = {}
        if provider_id:
            params["provider_id"] = provider_id
        if window_start:
            params["start"] = window_start.isoformat()
        if window_end:
            params["end"] = window_end.isoformat()
        response = self._client.get(API_PREFIX, params=params)
        self._raise_for_error(response)
        return [AppointmentSchema.model_validate(item).to_domain() for item in response.json()]

    def create_appointment(
        self,
        client_id: str,
        provider_id: str,
        interval: TimeInterval,
        service_ids: Sequence[str],
        notes: str | None = None,
    ) -> Appointment:
        payload = {
            "client_id": client_id,
            "provider_id": provider_id,
            "start": interval.start.isoformat(),
            "end": interval.end.isoformat(),
            "service_ids": list(service_ids),
            "notes": notes,
        }
        response = self._client.post(API_PREFIX, json=payload)
        return self._parse(response, interval=interval)

    def reschedule_appointment(
        self,
        appointment_id: str,
        new_interval: TimeInterval,
        new_provider_id: str | None = None,
    ) -> Appointment:
        payload = {
            "start": new_interval.start.isoformat(),
            "end": new_interval.end.isoformat(),
            "provider_id": new_provider_id,
        }
        response = self._client.post(f"{API_PREFIX}/{appointment_id}/reschedule", json=payload)
        return self._parse(response, appointment_id=appointment_id, interval=new_interval)

    def transition_status(
        self,
        appointment_id: str,
        target: AppointmentStatus,
        reason: str | None = None,
    ) -> Appointment:
        payload = {"status": target.value, "reason": reason}
        response = self._client.post(f"{API_PREFIX}/{appointment_id}/status", json=payload)
        return self._parse(response, appointment_id=appointment_id)

    def _parse(
        self,
        response: httpx.Response,
        appointment_id: str | None = None,
        interval: TimeInterval | None = None,
    ) -> Appointment:
        self._raise_for_error(response, appointment_id=appointment_id, interval=interval)
        return AppointmentSchema.model_validate(response.json()).to_domain()

    def _raise_for_error(
        self,
        response: httpx.Response,
        appointment_id: str | None = None,
        interval: TimeInterval | None = None,
    ) -> None:
        if response.is_success:
            return

        detail: Any = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("detail")

        if not isinstance(detail, dict) or "error" not in detail:
            response.raise_for_status()
            return

        code = detail["error"]
        message = detail.get("message", "")
        self._logger.info(
            "Scheduling API returned typed failure",
            extra={"appointment_id": appointment_id, "error": code},
        )

        if code == ConflictError.code:
            conflict = detail["conflict"]
            raise ConflictError(
                conflict["id"],
                conflict["provider_id"],
                TimeInterval(
                    start=datetime.fromisoformat(conflict["start"]),
                    end=datetime.fromisoformat(conflict["end"]),
                ),
            )
        if code == InvalidTransitionError.code:
            raise InvalidTransitionError(
                AppointmentStatus(detail["current_status"]),
                AppointmentStatus(detail["target_status"]),
            )
        if code == NotEditableError.code:
            raise NotEditableError(appointment_id or "", AppointmentStatus(detail["status"]))
        if code == AppointmentNotFoundError.code:
            raise AppointmentNotFoundError(appointment_id or "")
        if code == UnknownServiceError.code:
            raise UnknownServiceError(detail.get("service_ids", []))
        if code == InvalidIntervalError.code and interval is not None:
            raise InvalidIntervalError(interval.start, interval.end)
        if code == BookingValidationError.code:
            raise BookingValidationError(message)
        if code == CommitmentStoreError.code:
            raise CommitmentStoreError(message)
        response.raise_for_status()

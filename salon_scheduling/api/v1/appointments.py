from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from salon_scheduling.api.v1.schemas import (
    AppointmentSchema,
    CancelRequestSchema,
    CreateAppointmentRequestSchema,
    RescheduleRequestSchema,
    StatusChangeRequestSchema,
    UpdateDetailsRequestSchema,
    localize,
)
from salon_scheduling.application.exceptions import (
    AppointmentNotFoundError,
    BookingValidationError,
    CommitmentStoreError,
    ConflictError,
    InvalidIntervalError,
    InvalidTransitionError,
    NotEditableError,
    SchedulingError,
    UnknownServiceError,
)
from salon_scheduling.application.use_cases.appointment_records import AppointmentRecordsUseCase
from salon_scheduling.application.use_cases.booking import CreateAppointmentUseCase
from salon_scheduling.application.use_cases.reschedule import RescheduleCoordinator
from salon_scheduling.application.use_cases.status_lifecycle import StatusLifecycleManager, allowed_targets
from salon_scheduling.domain.entities.appointment import AppointmentStatus
from salon_scheduling.domain.entities.time_interval import TimeInterval
from salon_scheduling.wiring.dependencies import (
    get_appointment_records_use_case,
    get_create_appointment_use_case,
    get_reschedule_coordinator,
    get_status_lifecycle_manager,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[SchedulingError], int] = {
    ConflictError: 409,
    InvalidTransitionError: 409,
    NotEditableError: 409,
    AppointmentNotFoundError: 404,
    UnknownServiceError: 422,
    InvalidIntervalError: 422,
    BookingValidationError: 400,
}


def _error_detail(exc: SchedulingError) -> dict[str, Any]:
    detail: dict[str, Any] = {"error": exc.code, "message": str(exc)}
    if isinstance(exc, ConflictError):
        detail["conflict"] = {
            "id": exc.conflicting_appointment_id,
            "provider_id": exc.provider_id,
            "start": exc.conflicting_interval.start.isoformat(),
            "end": exc.conflicting_interval.end.isoformat(),
        }
    elif isinstance(exc, InvalidTransitionError):
        detail["current_status"] = exc.current.value
        detail["target_status"] = exc.target.value
        detail["allowed"] = [s.value for s in allowed_targets(exc.current)]
    elif isinstance(exc, NotEditableError):
        detail["status"] = exc.status.value
    elif isinstance(exc, UnknownServiceError):
        detail["service_ids"] = list(exc.service_ids)
    return detail


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except SchedulingError as e:
        raise HTTPException(status_code=_STATUS_CODES.get(type(e), 400), detail=_error_detail(e)) from e
    except CommitmentStoreError as e:
        logger.exception("Commitment store failure", extra={"error": str(e)})
        raise HTTPException(
            status_code=503,
            detail={"error": CommitmentStoreError.code, "message": "Schedule storage is unavailable"},
        ) from e


@router.get("/appointments", response_model=list[AppointmentSchema])
def list_appointments(
    provider_id: str | None = None,
    client_id: str | None = None,
    status: AppointmentStatus | None = None,
    start: datetime | None = Query(None, description="Window start (inclusive)"),
    end: datetime | None = Query(None, description="Window end (exclusive)"),
    uc: AppointmentRecordsUseCase = Depends(get_appointment_records_use_case),
):
    with _translate_errors():
        appointments = uc.list_appointments(
            provider_id=provider_id,
            client_id=client_id,
            status=status,
            window_start=localize(start),
            window_end=localize(end),
        )
    return [AppointmentSchema.from_domain(a) for a in appointments]


@router.get("/appointments/{appointment_id}", response_model=AppointmentSchema)
def get_appointment(
    appointment_id: str,
    uc: AppointmentRecordsUseCase = Depends(get_appointment_records_use_case),
):
    with _translate_errors():
        appointment = uc.get(appointment_id)
    return AppointmentSchema.from_domain(appointment)


@router.post("/appointments", response_model=AppointmentSchema, status_code=201)
def create_appointment(
    req: CreateAppointmentRequestSchema,
    uc: CreateAppointmentUseCase = Depends(get_create_appointment_use_case),
):
    with _translate_errors():
        if req.end is None:
            appointment = uc.execute_from_start(
                client_id=req.client_id,
                provider_id=req.provider_id,
                start=req.start,
                service_ids=req.service_ids,
                notes=req.notes,
            )
        else:
            appointment = uc.execute(
                client_id=req.client_id,
                provider_id=req.provider_id,
                interval=TimeInterval(start=req.start, end=req.end),
                service_ids=req.service_ids,
                notes=req.notes,
            )
    return AppointmentSchema.from_domain(appointment)


@router.post("/appointments/{appointment_id}/reschedule", response_model=AppointmentSchema)
def reschedule_appointment(
    appointment_id: str,
    req: RescheduleRequestSchema,
    coordinator: RescheduleCoordinator = Depends(get_reschedule_coordinator),
):
    with _translate_errors():
        appointment = coordinator.reschedule(
            appointment_id,
            TimeInterval(start=req.start, end=req.end),
            new_provider_id=req.provider_id,
        )
    return AppointmentSchema.from_domain(appointment)


@router.post("/appointments/{appointment_id}/status", response_model=AppointmentSchema)
def transition_status(
    appointment_id: str,
    req: StatusChangeRequestSchema,
    lifecycle: StatusLifecycleManager = Depends(get_status_lifecycle_manager),
):
    with _translate_errors():
        appointment = lifecycle.transition(appointment_id, req.status, reason=req.reason)
    return AppointmentSchema.from_domain(appointment)


@router.patch("/appointments/{appointment_id}/cancel", response_model=AppointmentSchema)
def cancel_appointment(
    appointment_id: str,
    req: CancelRequestSchema,
    lifecycle: StatusLifecycleManager = Depends(get_status_lifecycle_manager),
):
    with _translate_errors():
        appointment = lifecycle.cancel(appointment_id, req.reason)
    return AppointmentSchema.from_domain(appointment)


@router.patch("/appointments/{appointment_id}", response_model=AppointmentSchema)
def update_appointment_details(
    appointment_id: str,
    req: UpdateDetailsRequestSchema,
    uc: AppointmentRecordsUseCase = Depends(get_appointment_records_use_case),
):
    changes = {name: getattr(req, name) for name in req.model_fields_set}
    with _translate_errors():
        appointment = uc.update_details(appointment_id, **changes)
    return AppointmentSchema.from_domain(appointment)


@router.delete("/appointments/{appointment_id}", status_code=204)
def delete_appointment(
    appointment_id: str,
    uc: AppointmentRecordsUseCase = Depends(get_appointment_records_use_case),
) -> Response:
    with _translate_errors():
        uc.delete(appointment_id)
    return Response(status_code=204)

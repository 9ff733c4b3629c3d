from functools import lru_cache
import logging

from fastapi import Depends

from salon_scheduling.core.config import settings
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.application.ports.service_catalog import ServiceCatalogPort
from salon_scheduling.application.use_cases.appointment_records import AppointmentRecordsUseCase
from salon_scheduling.application.use_cases.booking import CreateAppointmentUseCase
from salon_scheduling.application.use_cases.price_snapshot import PriceSnapshotResolver
from salon_scheduling.application.use_cases.reschedule import RescheduleCoordinator
from salon_scheduling.application.use_cases.status_lifecycle import StatusLifecycleManager
from salon_scheduling.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from salon_scheduling.infrastructure.store.json_store import JsonCommitmentStore
from salon_scheduling.infrastructure.store.memory_store import MemoryCommitmentStore


@lru_cache
def get_commitment_store() -> CommitmentStorePort:
    logger = logging.getLogger(__name__)
    provider = settings.STORE_PROVIDER.lower()
    if provider == "memory":
        logger.info("Using MemoryCommitmentStore")
        return MemoryCommitmentStore()
    if provider == "json":
        logger.info("Using JsonCommitmentStore at %s", settings.STORE_DATA_DIR)
        return JsonCommitmentStore(data_dir=settings.STORE_DATA_DIR)
    raise ValueError(f"Unknown STORE_PROVIDER: {settings.STORE_PROVIDER!r}")


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


def get_create_appointment_use_case(
    store: CommitmentStorePort = Depends(get_commitment_store),
    catalog: ServiceCatalogPort = Depends(get_service_catalog),
) -> CreateAppointmentUseCase:
    return CreateAppointmentUseCase(store=store, snapshot=PriceSnapshotResolver(catalog))


def get_reschedule_coordinator(
    store: CommitmentStorePort = Depends(get_commitment_store),
) -> RescheduleCoordinator:
    return RescheduleCoordinator(store=store, lock_attempts=settings.STORE_LOCK_ATTEMPTS)


def get_status_lifecycle_manager(
    store: CommitmentStorePort = Depends(get_commitment_store),
) -> StatusLifecycleManager:
    return StatusLifecycleManager(store=store, lock_attempts=settings.STORE_LOCK_ATTEMPTS)


def get_appointment_records_use_case(
    store: CommitmentStorePort = Depends(get_commitment_store),
) -> AppointmentRecordsUseCase:
    return AppointmentRecordsUseCase(store=store, lock_attempts=settings.STORE_LOCK_ATTEMPTS)

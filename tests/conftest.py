"""Shared test fixtures and helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from salon_scheduling.application.use_cases.appointment_records import AppointmentRecordsUseCase
from salon_scheduling.application.use_cases.booking import CreateAppointmentUseCase
from salon_scheduling.application.use_cases.price_snapshot import PriceSnapshotResolver
from salon_scheduling.application.use_cases.reschedule import RescheduleCoordinator
from salon_scheduling.application.use_cases.status_lifecycle import StatusLifecycleManager
from salon_scheduling.domain.entities.time_interval import TimeInterval
from salon_scheduling.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from salon_scheduling.infrastructure.store.memory_store import MemoryCommitmentStore

DAY = datetime(2026, 3, 18, tzinfo=timezone.utc)  # a Wednesday

CUT = "ladies-cut-blow-dry"  # 60 min, 53.00
BLOW_DRY = "ladies-blow-dry-short"  # 30 min, 28.00


def at(hour: int, minute: int = 0) -> datetime:
    """Helper to build a UTC time on the test day."""
    return DAY.replace(hour=hour, minute=minute)


def slot(start: str, end: str) -> TimeInterval:
    """Helper to build an interval from 'HH:MM' strings on the test day."""
    sh, sm = (int(p) for p in start.split(":"))
    eh, em = (int(p) for p in end.split(":"))
    return TimeInterval(start=at(sh, sm), end=at(eh, em))


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now = self.now + timedelta(minutes=minutes)


@pytest.fixture
def clock():
    return FixedClock(DAY.replace(hour=8))


@pytest.fixture
def store():
    return MemoryCommitmentStore()


@pytest.fixture
def catalog():
    return ServiceCatalogStore()


@pytest.fixture
def create_uc(store, catalog, clock):
    return CreateAppointmentUseCase(store=store, snapshot=PriceSnapshotResolver(catalog), clock=clock)


@pytest.fixture
def coordinator(store, clock):
    return RescheduleCoordinator(store=store, clock=clock)


@pytest.fixture
def lifecycle(store, clock):
    return StatusLifecycleManager(store=store, clock=clock)


@pytest.fixture
def records(store, clock):
    return AppointmentRecordsUseCase(store=store, clock=clock)


@pytest.fixture
def book(create_uc):
    """Book an appointment for a provider in one call."""

    def _book(provider_id: str, start: str, end: str, client_id: str = "client-1", services=(CUT,)):
        return create_uc.execute(client_id, provider_id, slot(start, end), list(services))

    return _book

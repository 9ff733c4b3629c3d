from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from salon_scheduling.application.exceptions import (
    BookingValidationError,
    ConflictError,
    InvalidIntervalError,
    UnknownServiceError,
)
from salon_scheduling.domain.entities.appointment import AppointmentStatus
from salon_scheduling.domain.entities.time_interval import TimeInterval
from tests.conftest import BLOW_DRY, CUT, at, slot


def test_new_appointment_starts_scheduled(create_uc, store, clock):
    appointment = create_uc.execute("client-1", "P", slot("10:00", "11:00"), [CUT, BLOW_DRY], notes="fringe only")

    assert appointment.status == AppointmentStatus.SCHEDULED
    assert appointment.service_ids == (CUT, BLOW_DRY)
    assert appointment.notes == "fringe only"
    assert appointment.cancellation_reason is None
    assert appointment.actual_start is None
    assert appointment.created_at == clock.now
    assert store.get(appointment.id) == appointment


def test_overlapping_booking_conflicts(book):
    """Scenario: 10:30-11:30 collides with a confirmed 10:00-11:00."""
    existing = book("P", "10:00", "11:00")

    with pytest.raises(ConflictError) as exc_info:
        book("P", "10:30", "11:30", client_id="client-2")

    error = exc_info.value
    assert error.conflicting_appointment_id == existing.id
    assert error.conflicting_interval == slot("10:00", "11:00")
    assert error.provider_id == "P"


def test_abutting_booking_succeeds(book):
    """Scenario: 11:00-12:00 right after 10:00-11:00 is fine."""
    book("P", "10:00", "11:00")
    assert book("P", "11:00", "12:00", client_id="client-2").status == AppointmentStatus.SCHEDULED


def test_same_slot_on_another_provider_succeeds(book):
    book("P", "10:00", "11:00")
    assert book("Q", "10:00", "11:00").provider_id == "Q"


def test_empty_service_list_is_a_validation_error(create_uc):
    with pytest.raises(BookingValidationError) as exc_info:
        create_uc.execute("client-1", "P", slot("10:00", "11:00"), [])
    assert not isinstance(exc_info.value, UnknownServiceError)


@pytest.mark.parametrize("client_id, provider_id", [("", "P"), ("client-1", ""), ("  ", "P")])
def test_missing_ids_are_validation_errors(create_uc, client_id, provider_id):
    with pytest.raises(BookingValidationError):
        create_uc.execute(client_id, provider_id, slot("10:00", "11:00"), [CUT])


def test_backwards_interval_rejected(create_uc, store):
    with pytest.raises(InvalidIntervalError):
        create_uc.execute("client-1", "P", slot("11:00", "10:00"), [CUT])
    with pytest.raises(InvalidIntervalError):
        create_uc.execute("client-1", "P", slot("10:00", "10:00"), [CUT])
    assert store.list_appointments() == []


def test_naive_datetimes_rejected_with_typed_error(create_uc, book, store):
    existing = book("P", "10:00", "11:00")
    naive = TimeInterval(start=at(12).replace(tzinfo=None), end=at(13).replace(tzinfo=None))

    with pytest.raises(InvalidIntervalError):
        create_uc.execute("client-2", "P", naive, [CUT])
    with pytest.raises(InvalidIntervalError):
        create_uc.execute_from_start("client-2", "P", at(12).replace(tzinfo=None), [CUT])
    assert store.list_appointments() == [existing]


def test_end_derived_from_service_durations(create_uc):
    appointment = create_uc.execute_from_start("client-1", "P", at(9), [CUT, BLOW_DRY])
    assert appointment.scheduled.end - appointment.scheduled.start == timedelta(minutes=90)


def test_derived_booking_still_checks_conflicts(create_uc, book):
    book("P", "10:00", "11:00")
    with pytest.raises(ConflictError):
        create_uc.execute_from_start("client-2", "P", at(9, 30), [CUT])


def test_concurrent_overlapping_bookings_only_one_wins(create_uc, store):
    """Scenario: two simultaneous requests for the same slot; exactly one is booked."""
    barrier = threading.Barrier(2)

    def attempt(client_id: str):
        barrier.wait()
        try:
            return create_uc.execute(client_id, "P", slot("10:00", "11:00"), [CUT])
        except ConflictError as e:
            return e

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(attempt, ["client-1", "client-2"]))

    booked = [r for r in results if not isinstance(r, ConflictError)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(booked) == 1
    assert len(conflicts) == 1
    assert conflicts[0].conflicting_appointment_id == booked[0].id
    assert len(store.list_active_commitments("P")) == 1


def test_many_concurrent_bookings_never_double_book(create_uc, store):
    workers = 8
    barrier = threading.Barrier(workers)

    def attempt(n: int):
        barrier.wait()
        # Staggered 60-minute requests, each overlapping its neighbours
        start = at(10) + timedelta(minutes=15 * n)
        interval = TimeInterval(start=start, end=start + timedelta(minutes=60))
        try:
            return create_uc.execute(f"client-{n}", "P", interval, [CUT])
        except ConflictError:
            return None

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(attempt, range(workers)))

    active = store.list_active_commitments("P")
    assert active
    for first, second in zip(active, active[1:]):
        assert first.scheduled.end <= second.scheduled.start

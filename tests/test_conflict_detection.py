from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from salon_scheduling.application.use_cases.conflict_detection import ConflictDetector, find_conflict
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, LineItem
from tests.conftest import slot

ITEMS = (LineItem(service_id="ladies-wash-cut", price=Decimal("35.00"), duration_minutes=45),)


def make_appointment(appointment_id: str, provider_id: str, start: str, end: str, status=AppointmentStatus.CONFIRMED):
    return Appointment(
        id=appointment_id,
        client_id="client-1",
        provider_id=provider_id,
        scheduled=slot(start, end),
        line_items=ITEMS,
        status=status,
    )


def test_abutting_proposal_is_not_a_conflict():
    existing = [make_appointment("a1", "P", "10:00", "11:00")]
    assert find_conflict("P", slot("11:00", "12:00"), existing) is None
    assert find_conflict("P", slot("09:00", "10:00"), existing) is None


def test_identical_interval_conflicts():
    existing = [make_appointment("a1", "P", "10:00", "11:00")]
    assert find_conflict("P", slot("10:00", "11:00"), existing).id == "a1"


def test_partial_overlap_conflicts_either_way_round():
    """A proposal overlapping an existing booking conflicts, and vice versa."""
    a = make_appointment("a", "P", "10:00", "11:00")
    b = make_appointment("b", "P", "10:30", "11:30")
    assert find_conflict("P", b.scheduled, [a]).id == "a"
    assert find_conflict("P", a.scheduled, [b]).id == "b"


def test_other_provider_never_conflicts():
    existing = [make_appointment("a1", "Q", "10:00", "11:00")]
    assert find_conflict("P", slot("10:00", "11:00"), existing) is None


def test_cancelled_and_no_show_free_their_slot():
    existing = [
        make_appointment("c", "P", "10:00", "11:00", AppointmentStatus.CANCELLED),
        make_appointment("n", "P", "10:00", "11:00", AppointmentStatus.NO_SHOW),
    ]
    assert find_conflict("P", slot("10:15", "10:45"), existing) is None


def test_excluded_appointment_is_ignored():
    existing = [make_appointment("a1", "P", "10:00", "11:00")]
    assert find_conflict("P", slot("10:30", "11:30"), existing, exclude_appointment_id="a1") is None


def test_earliest_starting_conflict_is_reported():
    existing = [
        make_appointment("late", "P", "11:00", "12:00"),
        make_appointment("early", "P", "09:30", "10:30"),
        make_appointment("middle", "P", "10:30", "11:00"),
    ]
    assert find_conflict("P", slot("10:00", "11:30"), existing).id == "early"


def test_detector_reads_store_without_side_effects(store):
    first = make_appointment("a1", "P", "10:00", "11:00")
    store.save(first)
    store.save(make_appointment("a2", "P", "12:00", "13:00", AppointmentStatus.CANCELLED))
    detector = ConflictDetector(store)

    # Repeated calls give the same answer and leave the store untouched
    for _ in range(3):
        assert detector.find_conflict("P", slot("10:30", "11:30")).id == "a1"
        assert detector.find_conflict("P", slot("12:00", "13:00")) is None

    assert store.get("a1") == first
    assert len(store.list_appointments()) == 2


def test_detector_sees_status_changes(store):
    booked = make_appointment("a1", "P", "10:00", "11:00")
    store.save(booked)
    detector = ConflictDetector(store)
    assert detector.find_conflict("P", slot("10:00", "11:00")) is not None

    store.save(replace(booked, status=AppointmentStatus.NO_SHOW))
    assert detector.find_conflict("P", slot("10:00", "11:00")) is None

"""
Tests for the file-backed commitment store.
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest

from salon_scheduling.application.exceptions import CommitmentStoreError, ConflictError
from salon_scheduling.application.use_cases.booking import CreateAppointmentUseCase
from salon_scheduling.application.use_cases.price_snapshot import PriceSnapshotResolver
from salon_scheduling.application.use_cases.reschedule import RescheduleCoordinator
from salon_scheduling.application.use_cases.status_lifecycle import StatusLifecycleManager
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, LineItem
from salon_scheduling.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from salon_scheduling.infrastructure.store.json_store import JsonCommitmentStore
from tests.conftest import CUT, at, slot


def make_appointment(appointment_id: str = "a1", provider_id: str = "P") -> Appointment:
    return Appointment(
        id=appointment_id,
        client_id="client-1",
        provider_id=provider_id,
        scheduled=slot("10:00", "11:00"),
        line_items=(LineItem(service_id="oap-blow-dry", price=Decimal("26.50"), duration_minutes=30),),
        notes="Prefers the window seat",
        created_at=at(8),
        updated_at=at(8),
    )


def test_json_store_persistence():
    """Test that JSON store persists and retrieves appointments correctly."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        original = make_appointment()

        with store.provider_lock("P"):
            store.save(original)

        # A fresh store over the same directory sees the same record
        reopened = JsonCommitmentStore(data_dir=tmpdir)
        retrieved = reopened.get("a1")

        assert retrieved == original
        assert retrieved.line_items[0].price == Decimal("26.50")
        assert retrieved.scheduled.start.tzinfo is not None


def test_reassignment_moves_record_between_files():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        appointment = make_appointment()
        with store.provider_lock("P"):
            store.save(appointment)

        with store.provider_lock("P", "Q"):
            store.save(replace(appointment, provider_id="Q"))

        assert store.list_active_commitments("P") == []
        assert [a.id for a in store.list_active_commitments("Q")] == ["a1"]
        assert store.get("a1").provider_id == "Q"

        p_doc = json.loads((Path(tmpdir) / "P.json").read_text(encoding="utf-8"))
        assert p_doc["appointments"] == {}


def test_interrupted_reassignment_resolves_to_latest_copy():
    """A move that crashed before the old file was rewritten leaves two copies."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        appointment = make_appointment()
        with store.provider_lock("P"):
            store.save(appointment)

        doc = json.loads((Path(tmpdir) / "P.json").read_text(encoding="utf-8"))
        doc["provider_id"] = "Q"
        doc["appointments"]["a1"]["provider_id"] = "Q"
        doc["appointments"]["a1"]["updated_at"] = at(9).isoformat()
        (Path(tmpdir) / "Q.json").write_text(json.dumps(doc), encoding="utf-8")

        assert store.list_active_commitments("P") == []
        assert [a.id for a in store.list_active_commitments("Q")] == ["a1"]
        assert store.get("a1").provider_id == "Q"
        assert len(store.list_appointments()) == 1

        with store.provider_lock("Q"):
            store.save(replace(store.get("a1"), notes="healed"))
        p_doc = json.loads((Path(tmpdir) / "P.json").read_text(encoding="utf-8"))
        assert p_doc["appointments"] == {}


def test_inactive_records_are_kept_but_not_commitments():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        with store.provider_lock("P"):
            store.save(replace(make_appointment("a1"), status=AppointmentStatus.CANCELLED, cancellation_reason=""))
            store.save(make_appointment("a2"))

        assert [a.id for a in store.list_active_commitments("P")] == ["a2"]
        assert {a.id for a in store.list_appointments(provider_id="P")} == {"a1", "a2"}
        assert store.get("a1").cancellation_reason == ""


def test_delete_removes_record():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        with store.provider_lock("P"):
            store.save(make_appointment())
            assert store.delete("a1") is True
            assert store.delete("a1") is False
        assert store.get("a1") is None


def test_provider_ids_are_safe_file_names():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        with store.provider_lock("../escape"):
            store.save(make_appointment(provider_id="../escape"))

        assert [p.parent for p in Path(tmpdir).iterdir()] == [Path(tmpdir)]
        assert store.get("a1").provider_id == "../escape"


def test_corrupt_file_is_an_error_not_an_empty_schedule():
    with tempfile.TemporaryDirectory() as tmpdir:
        (Path(tmpdir) / "P.json").write_text("{not json", encoding="utf-8")
        store = JsonCommitmentStore(data_dir=tmpdir)

        with pytest.raises(CommitmentStoreError):
            store.list_active_commitments("P")


def test_use_cases_over_json_store():
    """Booking, conflicts, rescheduling and cancellation work the same on disk."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonCommitmentStore(data_dir=tmpdir)
        create = CreateAppointmentUseCase(store=store, snapshot=PriceSnapshotResolver(ServiceCatalogStore()))
        coordinator = RescheduleCoordinator(store=store)
        lifecycle = StatusLifecycleManager(store=store)

        first = create.execute("client-1", "P", slot("10:00", "11:00"), [CUT])
        with pytest.raises(ConflictError):
            create.execute("client-2", "P", slot("10:30", "11:30"), [CUT])

        moved = coordinator.reschedule(first.id, slot("10:00", "11:00"), "Q")
        assert moved.provider_id == "Q"
        assert create.execute("client-2", "P", slot("10:30", "11:30"), [CUT]).provider_id == "P"

        lifecycle.cancel(first.id, "")
        assert JsonCommitmentStore(data_dir=tmpdir).get(first.id).status == AppointmentStatus.CANCELLED

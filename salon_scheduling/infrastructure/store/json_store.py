from __future__ import annotations

import json
import os
import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any
from urllib.parse import quote

from salon_scheduling.application.exceptions import CommitmentStoreError
from salon_scheduling.application.ports.commitment_store import CommitmentStorePort
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, LineItem
from salon_scheduling.domain.entities.time_interval import TimeInterval
from salon_scheduling.infrastructure.store.memory_store import matches_filters


class JsonCommitmentStore(CommitmentStorePort):
    """One JSON document per provider, rewritten atomically on every save."""

    def __init__(self, data_dir: str = "./data/appointments") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._io_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict

    def _get_lock(self, provider_id: str) -> threading.Lock:
        """Get or create a lock for a provider_id."""
        with self._lock_lock:
            if provider_id not in self._locks:
                self._locks[provider_id] = threading.Lock()
            return self._locks[provider_id]

    @contextmanager
    def provider_lock(self, *provider_ids: str) -> Iterator[None]:
        with ExitStack() as stack:
            for provider_id in sorted(set(provider_ids)):
                stack.enter_context(self._get_lock(provider_id))
            yield

    def _get_file_path(self, provider_id: str) -> Path:
        """Get the file path for a provider_id."""
        return self._data_dir / f"{quote(provider_id, safe='')}.json"

    def _load_provider_data(self, path: Path) -> dict[str, Any]:
        """Load a provider document, return an empty one if missing."""
        if not path.exists():
            return {"appointments": {}, "version": 1}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            # An unreadable schedule must not be mistaken for an empty one.
            raise CommitmentStoreError(f"Cannot read schedule file {path.name}: {e}") from e
        data.setdefault("appointments", {})
        data.setdefault("version", 1)
        return data

    def _save_provider_data(self, provider_id: str, data: dict[str, Any]) -> None:
        """Save provider document to JSON file atomically."""
        file_path = self._get_file_path(provider_id)
        temp_path = file_path.with_suffix(".json.tmp")
        data["provider_id"] = provider_id
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, file_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise CommitmentStoreError(f"Cannot write schedule file {file_path.name}: {e}") from e

    def _iter_documents(self) -> Iterator[tuple[Path, dict[str, Any]]]:
        for path in sorted(self._data_dir.glob("*.json")):
            yield path, self._load_provider_data(path)

    def _locate(self, appointment_id: str) -> list[tuple[str, dict[str, Any]]]:
        """Every provider document holding the record (more than one only after an interrupted move)."""
        return [
            (data.get("provider_id", path.stem), data)
            for path, data in self._iter_documents()
            if appointment_id in data["appointments"]
        ]

    def _latest_records(self) -> dict[str, dict[str, Any]]:
        """All records by id, keeping the most recently updated copy of duplicates."""
        latest: dict[str, dict[str, Any]] = {}
        for _path, data in self._iter_documents():
            for appointment_id, record in data["appointments"].items():
                kept = latest.get(appointment_id)
                if kept is None or _updated_key(record) > _updated_key(kept):
                    latest[appointment_id] = record
        return latest

    def get(self, appointment_id: str) -> Appointment | None:
        with self._io_lock:
            copies = [data["appointments"][appointment_id] for _pid, data in self._locate(appointment_id)]
        if not copies:
            return None
        return self._deserialize(max(copies, key=_updated_key))

    def save(self, appointment: Appointment) -> Appointment:
        with self._io_lock:
            target = self._load_provider_data(self._get_file_path(appointment.provider_id))
            target["appointments"][appointment.id] = self._serialize(appointment)
            # Write the new home before removing older copies.
            self._save_provider_data(appointment.provider_id, target)
            for provider_id, data in self._locate(appointment.id):
                if provider_id != appointment.provider_id:
                    del data["appointments"][appointment.id]
                    self._save_provider_data(provider_id, data)
        return appointment

    def delete(self, appointment_id: str) -> bool:
        with self._io_lock:
            found = self._locate(appointment_id)
            for provider_id, data in found:
                del data["appointments"][appointment_id]
                self._save_provider_data(provider_id, data)
        return bool(found)

    def list_active_commitments(self, provider_id: str) -> list[Appointment]:
        with self._io_lock:
            records = list(self._latest_records().values())
        appointments = [self._deserialize(record) for record in records if record.get("provider_id") == provider_id]
        active = [a for a in appointments if a.is_active]
        return sorted(active, key=lambda a: (a.scheduled.start, a.id))

    def list_appointments(
        self,
        provider_id: str | None = None,
        client_id: str | None = None,
        status: AppointmentStatus | None = None,
        window_start: datetime | None = None,
        window_end: datetime | None = None,
    ) -> list[Appointment]:
        with self._io_lock:
            records = list(self._latest_records().values())
        appointments = [self._deserialize(record) for record in records]
        matches = [
            a
            for a in appointments
            if matches_filters(a, provider_id, client_id, status, window_start, window_end)
        ]
        return sorted(matches, key=lambda a: (a.scheduled.start, a.id))

    def _serialize(self, appointment: Appointment) -> dict[str, Any]:
        """Serialize Appointment to dict with ISO string conversion."""
        return {
            "id": appointment.id,
            "client_id": appointment.client_id,
            "provider_id": appointment.provider_id,
            "scheduled_start": appointment.scheduled.start.isoformat(),
            "scheduled_end": appointment.scheduled.end.isoformat(),
            "status": appointment.status.value,
            "line_items": [
                {
                    "service_id": item.service_id,
                    "price": str(item.price),
                    "duration_minutes": item.duration_minutes,
                }
                for item in appointment.line_items
            ],
            "notes": appointment.notes,
            "cancellation_reason": appointment.cancellation_reason,
            "actual_start": _iso_or_none(appointment.actual_start),
            "actual_end": _iso_or_none(appointment.actual_end),
            "created_at": _iso_or_none(appointment.created_at),
            "updated_at": _iso_or_none(appointment.updated_at),
        }

    def _deserialize(self, data: dict[str, Any]) -> Appointment:
        """Deserialize dict to Appointment with datetime parsing."""
        try:
            return Appointment(
                id=data["id"],
                client_id=data["client_id"],
                provider_id=data["provider_id"],
                scheduled=TimeInterval(
                    start=datetime.fromisoformat(data["scheduled_start"]),
                    end=datetime.fromisoformat(data["scheduled_end"]),
                ),
                line_items=tuple(
                    LineItem(
                        service_id=item["service_id"],
                        price=Decimal(item["price"]),
                        duration_minutes=int(item["duration_minutes"]),
                    )
                    for item in data.get("line_items", [])
                ),
                status=AppointmentStatus(data["status"]),
                notes=data.get("notes"),
                cancellation_reason=data.get("cancellation_reason"),
                actual_start=_parse_or_none(data.get("actual_start")),
                actual_end=_parse_or_none(data.get("actual_end")),
                created_at=_parse_or_none(data.get("created_at")),
                updated_at=_parse_or_none(data.get("updated_at")),
            )
        except (KeyError, ValueError, TypeError, InvalidOperation) as e:
            raise CommitmentStoreError(f"Malformed appointment record: {e}") from e


def _iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_or_none(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _updated_key(record: dict[str, Any]) -> datetime:
    try:
        return _parse_or_none(record.get("updated_at")) or datetime.min.replace(tzinfo=timezone.utc)
    except (TypeError, ValueError) as e:
        raise CommitmentStoreError(f"Malformed appointment record: {e}") from e

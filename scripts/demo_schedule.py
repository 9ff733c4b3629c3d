from __future__ import annotations

import sys
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

sys.path.insert(0, ".")

from salon_scheduling.application.exceptions import ConflictError, InvalidTransitionError, NotEditableError
from salon_scheduling.application.use_cases.booking import CreateAppointmentUseCase
from salon_scheduling.application.use_cases.price_snapshot import PriceSnapshotResolver
from salon_scheduling.application.use_cases.reschedule import RescheduleCoordinator
from salon_scheduling.application.use_cases.status_lifecycle import StatusLifecycleManager
from salon_scheduling.domain.entities.appointment import AppointmentStatus
from salon_scheduling.domain.entities.time_interval import TimeInterval
from salon_scheduling.infrastructure.knowledge.service_catalog_store import ServiceCatalogStore
from salon_scheduling.infrastructure.store.memory_store import MemoryCommitmentStore

TZ = ZoneInfo("Europe/London")
DAY = datetime.now(TZ).replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)


def hhmm(value: str) -> datetime:
    hour, minute = (int(p) for p in value.split(":"))
    return DAY.replace(hour=hour, minute=minute)


def window(start: str, end: str) -> TimeInterval:
    return TimeInterval(start=hhmm(start), end=hhmm(end))


def main():
    store = MemoryCommitmentStore()
    catalog = ServiceCatalogStore()
    create = CreateAppointmentUseCase(store=store, snapshot=PriceSnapshotResolver(catalog))
    coordinator = RescheduleCoordinator(store=store)
    lifecycle = StatusLifecycleManager(store=store)

    morning = create.execute("client-ana", "stylist-jo", window("10:00", "11:00"), ["ladies-cut-blow-dry"])
    print(f"✅ Booked {morning.id} at {morning.scheduled.start:%H:%M} for {morning.line_items[0].price}")

    try:
        create.execute("client-ben", "stylist-jo", window("10:30", "11:30"), ["gents-wash-cut"])
        print("❌ Overlapping booking was accepted")
    except ConflictError as e:
        print(f"✅ Overlap rejected, blocked by {e.conflicting_appointment_id}")

    adjacent = create.execute_from_start("client-ben", "stylist-jo", hhmm("11:00"), ["gents-wash-cut"])
    print(f"✅ Back-to-back booking accepted until {adjacent.scheduled.end:%H:%M}")

    moved = coordinator.reschedule(morning.id, window("14:00", "15:00"), new_provider_id="stylist-sam")
    print(f"✅ Moved to {moved.provider_id} at {moved.scheduled.start:%H:%M}")

    lifecycle.transition(moved.id, AppointmentStatus.IN_PROGRESS)
    done = lifecycle.transition(moved.id, AppointmentStatus.COMPLETED)
    print(f"✅ Completed, actual end stamped at {done.actual_end:%H:%M}")

    try:
        lifecycle.transition(done.id, AppointmentStatus.CONFIRMED)
        print("❌ Completed appointment was re-opened")
    except InvalidTransitionError as e:
        print(f"✅ Terminal status held: {e}")

    try:
        coordinator.reschedule(done.id, window("16:00", "17:00"))
        print("❌ Completed appointment was moved")
    except NotEditableError as e:
        print(f"✅ {e}")

    cancelled = lifecycle.cancel(adjacent.id, "Client called in sick")
    freed = create.execute("client-cara", "stylist-jo", window("11:00", "11:30"), ["ladies-blow-dry-short"])
    print(f"✅ Cancelled {cancelled.id}, slot re-booked by {freed.client_id}")


if __name__ == "__main__":
    main()

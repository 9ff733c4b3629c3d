from __future__ import annotations

from datetime import datetime, timedelta

from salon_scheduling.application.exceptions import InvalidIntervalError
from salon_scheduling.domain.entities.appointment import LineItem
from salon_scheduling.domain.entities.time_interval import TimeInterval


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def ensure_aware(start: datetime | None, end: datetime | None) -> None:
    """Reject naive datetimes; stored commitments are always timezone-aware."""
    for value in (start, end):
        if value is not None and not is_aware(value):
            raise InvalidIntervalError(start, end, f"Datetime {value.isoformat()} has no timezone")


def ensure_valid_interval(interval: TimeInterval) -> TimeInterval:
    ensure_aware(interval.start, interval.end)
    if not interval.is_valid:
        raise InvalidIntervalError(interval.start, interval.end)
    return interval


def interval_for_services(start: datetime, line_items: tuple[LineItem, ...]) -> TimeInterval:
    """Interval starting at `start` long enough for every booked service."""
    total_minutes = sum(item.duration_minutes for item in line_items)
    return ensure_valid_interval(TimeInterval(start=start, end=start + timedelta(minutes=total_minutes)))

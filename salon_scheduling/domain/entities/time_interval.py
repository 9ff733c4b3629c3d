from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TimeInterval:
    """Half-open range [start, end). Touching endpoints do not overlap."""

    start: datetime
    end: datetime

    @property
    def is_valid(self) -> bool:
        return self.start < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: TimeInterval) -> bool:
        return self.start < other.end and other.start < self.end

    def with_end(self, end: datetime) -> TimeInterval:
        return TimeInterval(start=self.start, end=end)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.overlaps(b)


def duration(interval: TimeInterval) -> timedelta:
    return interval.duration

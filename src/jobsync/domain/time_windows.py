"""Closed-open time windows used to bound call and job lookups."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """Return ``value`` in UTC, reading naive datetimes as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """``[start, end)`` in UTC."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise ValueError("Time window values must include timezone information")
        if self.start > self.end:
            raise ValueError("Time window start must be before end")

    @classmethod
    def around(
        cls,
        reference: datetime,
        *,
        before: timedelta,
        after: timedelta,
    ) -> TimeWindow:
        anchor = ensure_aware(reference)
        return cls(start=anchor - before, end=anchor + after)

    def contains(self, instant: datetime) -> bool:
        return self.start <= ensure_aware(instant) < self.end


def is_within_days_before(candidate: datetime, reference: datetime, *, days: int) -> bool:
    """True when ``candidate`` lies in ``[reference - days, reference]``."""

    age = ensure_aware(reference) - ensure_aware(candidate)
    return timedelta(0) <= age <= timedelta(days=days)


__all__ = ["Clock", "TimeWindow", "ensure_aware", "is_within_days_before", "utcnow"]

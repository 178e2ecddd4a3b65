"""Choice of the component whose fields are mirrored onto its parent."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from jobsync.domain.model import JobStatus
from jobsync.domain.time_windows import ensure_aware

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from jobsync.domain.model import JobComponent, ParentJobRecord

type TierKey = Callable[[JobComponent, datetime], datetime | None]


@dataclass(frozen=True, slots=True)
class SelectionTier:
    """Components with a key take part; the earliest or latest key wins."""

    name: str
    key: TierKey
    prefer: Literal["earliest", "latest"]

    def pick(self, components: Sequence[JobComponent], now: datetime) -> JobComponent | None:
        keyed = [
            (key, index, component)
            for index, component in enumerate(components)
            if (key := self.key(component, now)) is not None
        ]
        if not keyed:
            return None
        if self.prefer == "earliest":
            return min(keyed, key=lambda item: (item[0], item[1]))[2]
        # ties go to the earlier list position
        return min(keyed, key=lambda item: (-item[0].timestamp(), item[1]))[2]


def _scheduled_start(component: JobComponent) -> datetime | None:
    if component.schedule is None or component.schedule.scheduled_start is None:
        return None
    return ensure_aware(component.schedule.scheduled_start)


def _future_start(component: JobComponent, now: datetime) -> datetime | None:
    start = _scheduled_start(component)
    return start if start is not None and start > now else None


def _past_start(component: JobComponent, now: datetime) -> datetime | None:
    start = _scheduled_start(component)
    return start if start is not None and start <= now else None


def _updated(component: JobComponent, _now: datetime) -> datetime | None:
    return ensure_aware(component.updated_at) if component.updated_at else None


def _created(component: JobComponent, _now: datetime) -> datetime | None:
    return ensure_aware(component.created_at) if component.created_at else None


PRIMARY_SELECTION_TIERS: tuple[SelectionTier, ...] = (
    SelectionTier("upcoming_schedule", _future_start, "earliest"),
    SelectionTier("recent_schedule", _past_start, "latest"),
    SelectionTier("recently_updated", _updated, "latest"),
    SelectionTier("recently_created", _created, "latest"),
)


def select_primary_component(
    components: Sequence[JobComponent],
    *,
    now: datetime,
    tiers: Sequence[SelectionTier] = PRIMARY_SELECTION_TIERS,
) -> JobComponent:
    if not components:
        raise ValueError("Cannot select a primary component from an empty list")
    reference = ensure_aware(now)
    for tier in tiers:
        chosen = tier.pick(components, reference)
        if chosen is not None:
            return chosen
    return components[0]


def mirrored_status(status: JobStatus) -> JobStatus:
    return JobStatus.CREATED if status is JobStatus.UPDATED else status


def mirror_primary(record: ParentJobRecord, component: JobComponent) -> None:
    record.status = mirrored_status(component.status)
    record.schedule = component.schedule
    record.customer = component.customer
    record.assigned_employees = component.assigned_employees
    record.category = component.category
    record.job_type = component.job_type
    record.created_at = component.created_at
    record.updated_at = component.updated_at
    record.completed_at = component.completed_at


def refresh_primary(record: ParentJobRecord, *, now: datetime) -> JobComponent | None:
    """Re-derive the mirrored fields of a combined record; standalone records are left alone."""

    if not record.components:
        return None
    primary = select_primary_component(record.components, now=now)
    mirror_primary(record, primary)
    return primary

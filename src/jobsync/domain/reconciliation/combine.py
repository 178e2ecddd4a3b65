"""Merging job components into parent records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from jobsync.domain.model import COMBINED_ID_SEPARATOR, COMPONENT_FIELDS, JobComponent, JobStatus

from .primary import refresh_primary

if TYPE_CHECKING:
    from collections.abc import Collection
    from datetime import datetime

    from jobsync.domain.model import ParentJobRecord

log = getLogger(__name__)

# Fields an event may overwrite on a component that already exists.
CANCELED_FIELDS: Final[frozenset[str]] = frozenset(
    {"status", "updated_at", "customer", "schedule", "category", "job_type"}
)
COMPLETED_FIELDS: Final[frozenset[str]] = CANCELED_FIELDS | {"completed_at", "revenue"}
# created/updated deliveries never move a component out of a terminal status
# and carry no completion time of their own
UPDATE_FIELDS: Final[frozenset[str]] = COMPONENT_FIELDS - {"status", "completed_at"}


def component_from_record(record: ParentJobRecord) -> JobComponent:
    """Synthesize the single component a standalone record stands for."""

    return JobComponent(
        job_id=record.job_id,
        revenue=record.revenue,
        status=record.status,
        created_at=record.created_at,
        updated_at=record.updated_at,
        completed_at=record.completed_at,
        schedule=record.schedule,
        customer=record.customer,
        assigned_employees=record.assigned_employees,
        category=record.category,
        job_type=record.job_type,
    )


def ensure_components(record: ParentJobRecord) -> list[JobComponent]:
    if not record.components:
        log.info(f"Migrating standalone job {record.job_id} to combined form")
        record.components = [component_from_record(record)]
    return record.components


def _apply_fields(
    target: JobComponent,
    source: JobComponent,
    overwrite: Collection[str],
) -> None:
    for name in overwrite:
        if name == "job_id":
            continue
        setattr(target, name, getattr(source, name))


def upsert_component(
    components: list[JobComponent],
    component: JobComponent,
    *,
    overwrite: Collection[str] | None = None,
) -> JobComponent:
    """Replace the component with the same job id in place, else append it."""

    for index, existing in enumerate(components):
        if existing.job_id != component.job_id:
            continue
        if overwrite is None:
            components[index] = component
            return component
        _apply_fields(existing, component, overwrite)
        return existing
    components.append(component)
    return component


def append_job_id(combined_id: str, job_id: str) -> str:
    parts = [part.strip() for part in combined_id.split(COMBINED_ID_SEPARATOR) if part.strip()]
    if job_id in parts:
        return combined_id
    return COMBINED_ID_SEPARATOR.join([*parts, job_id])


def recompute_revenue(record: ParentJobRecord) -> float:
    record.revenue = sum(component.revenue for component in record.components or ())
    return record.revenue


def combine_component(
    record: ParentJobRecord,
    component: JobComponent,
    *,
    job_id: str,
    now: datetime,
    overwrite: Collection[str] | None = None,
) -> ParentJobRecord:
    """Fold ``component`` into ``record`` and re-derive its aggregate fields.

    ``overwrite`` limits which fields replace those of an existing component with
    the same job id; ``None`` replaces the component wholesale. The record is
    mutated and returned; persisting it is up to the caller.
    """

    components = ensure_components(record)
    upsert_component(components, component, overwrite=overwrite)
    recompute_revenue(record)
    record.job_id = append_job_id(record.job_id, job_id)
    refresh_primary(record, now=now)
    return record


def mark_canceled(record: ParentJobRecord, *, job_id: str, now: datetime) -> bool:
    """Cancel ``job_id`` inside ``record``; return whether anything matched.

    Sibling components and the aggregate revenue are left untouched.
    """

    if not record.components:
        record.status = JobStatus.CANCELED
        record.updated_at = now
        return True
    component = record.component_for(job_id)
    if component is None:
        return False
    component.status = JobStatus.CANCELED
    component.updated_at = now
    refresh_primary(record, now=now)
    return True

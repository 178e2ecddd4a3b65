"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from jobsync.adapters.geocoding import NominatimGeocoder
from jobsync.adapters.housecall import parse_job_payload
from jobsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from jobsync.config import get_reconciliation_config
from jobsync.domain.ports.unit_of_work import ReconciliationUnitOfWork
from jobsync.domain.reconciliation import (
    Collaborators,
    EventOutcome,
    JobEventProcessor,
    KeyedLock,
)
from jobsync.domain.time_windows import utcnow

if TYPE_CHECKING:
    from jobsync.adapters.housecall import JobPayloadInput
    from jobsync.config import ReconciliationConfig
    from jobsync.domain.model import CallRecord, Company, JobStatus, ParentJobRecord
    from jobsync.domain.ports import BestCallMatcher, Geocoder, RevenueLossCalculator
    from jobsync.domain.time_windows import Clock

UnitOfWorkFactory = Callable[[], ReconciliationUnitOfWork]

log = getLogger(__name__)

# Shared by every event handled in this process; one entry per in-flight (company, job).
EVENT_LOCKS = KeyedLock()


async def ignore_revenue_loss(
    job_id: str,
    record: ParentJobRecord | None,
    status: JobStatus,
    call: CallRecord | None,
    company: Company,
) -> None:
    _ = (record, call)
    log.debug(f"No revenue-loss calculator configured ({company.id}/{job_id}: {status})")


def build_geocoder() -> Geocoder | None:
    """Nominatim geocoder when a contact address is configured, else ``None``."""

    if not os.getenv("JOBSYNC_GEOCODER_CONTACT"):
        return None
    return NominatimGeocoder()


def build_collaborators(
    match_best_call: BestCallMatcher,
    *,
    calculate_revenue_loss: RevenueLossCalculator | None = None,
    geocode: Geocoder | None = None,
) -> Collaborators:
    return Collaborators(
        match_best_call=match_best_call,
        calculate_revenue_loss=calculate_revenue_loss or ignore_revenue_loss,
        geocode=geocode,
    )


async def handle_job_event(
    raw_job: JobPayloadInput,
    event_type: str | None,
    job_id: str,
    company: Company,
    *,
    collaborators: Collaborators,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
    clock: Clock = utcnow,
) -> EventOutcome:
    """Reconcile one job webhook delivery inside a single transaction.

    The per-job lock spans the whole unit of work so a second delivery for the
    same job only reads state after the first one committed.
    """

    payload = parse_job_payload(raw_job, job_id=job_id)
    if unit_of_work_factory is None:
        if not is_started():
            await startup()
        unit_of_work_factory = SqlAlchemyUnitOfWork
    effective_config = config or get_reconciliation_config()

    async with EVENT_LOCKS.hold((company.id, job_id)), unit_of_work_factory() as uow:
        processor = JobEventProcessor(
            repositories=uow.repositories,
            collaborators=collaborators,
            config=effective_config,
            clock=clock,
        )
        outcome = await processor.process(payload, event_type, job_id, company)
        await uow.commit()

    log.info(
        f"Committed {event_type or 'update'} for job {job_id} of company {company.id}: "
        f"{outcome.action}"
    )
    return outcome


def process_job_event(
    raw_job: JobPayloadInput,
    event_type: str | None,
    job_id: str,
    company: Company,
    *,
    collaborators: Collaborators,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
) -> EventOutcome:
    """Blocking wrapper around ``handle_job_event`` for synchronous callers."""

    return asyncio.run(
        handle_job_event(
            raw_job,
            event_type,
            job_id,
            company,
            collaborators=collaborators,
            unit_of_work_factory=unit_of_work_factory,
            config=config,
        )
    )

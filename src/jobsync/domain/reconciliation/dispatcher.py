"""Per-event orchestration of call discovery, linking and component merging.

Each delivery is handled statelessly: the stored records are the only state, and
replaying an event converges on the same result. Events for one
``(company, job)`` pair are serialized through a ``KeyedLock``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from jobsync.config.reconciliation import ReconciliationConfig
from jobsync.domain.model import (
    UNKNOWN_CATEGORY,
    JobComponent,
    JobStatus,
    MatchReason,
    ParentJobRecord,
)
from jobsync.domain.phones import normalize_phone
from jobsync.domain.time_windows import ensure_aware, utcnow

from .candidates import collect_phone_numbers, retrieve_candidate_calls
from .combine import (
    CANCELED_FIELDS,
    COMPLETED_FIELDS,
    UPDATE_FIELDS,
    combine_component,
    mark_canceled,
)
from .linked_jobs import find_linked_job
from .locks import KeyedLock
from .primary import mirror_primary
from .tags import reconcile_qualification_tags
from .timestamps import normalize_event_timestamps

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime

    from jobsync.domain.model import (
        Address,
        CallRecord,
        Company,
        GeoPoint,
        HistoricalAverageSnapshot,
        JobPayload,
        MatchResult,
    )
    from jobsync.domain.ports import (
        BestCallMatcher,
        Geocoder,
        IsCallLinked,
        PhoneNormalizer,
        ReconciliationRepositories,
        RevenueLossCalculator,
    )
    from jobsync.domain.time_windows import Clock

    from .timestamps import EventTimestamps

log = getLogger(__name__)


class EventKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CANCELED = "canceled"
    COMPLETED = "completed"
    DELETED = "deleted"

    @classmethod
    def parse(cls, raw: str | None) -> EventKind | None:
        """Read ``job.created``-style names; absent types count as updates."""

        if raw is None or not raw.strip():
            return cls.UPDATED
        name = raw.strip().lower().removeprefix("job.")
        name = _EVENT_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return None


_EVENT_ALIASES: Final[dict[str, str]] = {"cancelled": "canceled"}


class OutcomeAction(StrEnum):
    CREATED = "created"
    COMBINED = "combined"
    CANCELED = "canceled"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class EventOutcome:
    kind: EventKind | None
    job_id: str
    action: OutcomeAction
    record: ParentJobRecord | None = None
    linked_call_id: str | None = None


@dataclass(slots=True)
class Collaborators:
    match_best_call: BestCallMatcher
    calculate_revenue_loss: RevenueLossCalculator
    normalize_phone: PhoneNormalizer = normalize_phone
    geocode: Geocoder | None = None


def build_component(
    payload: JobPayload,
    job_id: str,
    *,
    status: JobStatus,
    timestamps: EventTimestamps,
) -> JobComponent:
    completed_at = timestamps.completed_at
    if status is JobStatus.COMPLETED and completed_at is None:
        completed_at = timestamps.updated_at
    return JobComponent(
        job_id=job_id,
        revenue=payload.total_amount,
        status=status,
        created_at=timestamps.created_at,
        updated_at=timestamps.updated_at,
        completed_at=completed_at,
        schedule=payload.schedule,
        customer=payload.customer,
        assigned_employees=payload.assigned_employees,
        category=payload.category or UNKNOWN_CATEGORY,
        job_type=payload.job_type or "",
    )


def snapshot_call(call: CallRecord | None) -> CallRecord | None:
    if call is None:
        return None
    return replace(call, created_at=ensure_aware(call.created_at), tags=tuple(call.tags))


def _mirrored_fields(record: ParentJobRecord) -> dict[str, object]:
    return {
        "components": record.components,
        "status": record.status,
        "schedule": record.schedule,
        "customer": record.customer,
        "assigned_employees": record.assigned_employees,
        "category": record.category,
        "job_type": record.job_type,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
        "completed_at": record.completed_at,
    }


type Handler = Callable[
    [JobEventProcessor, JobPayload, str, Company],
    Awaitable[EventOutcome],
]


@dataclass(slots=True)
class JobEventProcessor:
    """Apply one job event to the stores.

    ``locks`` serializes events for the same job only across calls on this
    processor. Callers that build a processor per event must hold their own
    per-job lock around the whole unit of work, as ``jobsync.app`` does.
    """

    repositories: ReconciliationRepositories
    collaborators: Collaborators
    config: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    clock: Clock = utcnow
    locks: KeyedLock = field(default_factory=KeyedLock)

    async def process(
        self,
        payload: JobPayload,
        event_type: str | None,
        job_id: str,
        company: Company,
    ) -> EventOutcome:
        kind = EventKind.parse(event_type)
        if kind is None:
            log.warning(f"Ignoring unsupported event type {event_type!r} for job {job_id}")
            return EventOutcome(kind=None, job_id=job_id, action=OutcomeAction.IGNORED)

        handler = EVENT_HANDLERS[kind]
        async with self.locks.hold((company.id, job_id)):
            outcome = await handler(self, payload, job_id, company)
        log.info(
            "Processed %s for job %s: %s (call=%s)",
            kind,
            job_id,
            outcome.action,
            outcome.linked_call_id,
        )
        return outcome

    async def handle_created(
        self, payload: JobPayload, job_id: str, company: Company
    ) -> EventOutcome:
        return await self._reconcile(
            EventKind.CREATED,
            payload,
            job_id,
            company,
            status=JobStatus.CREATED,
            overwrite=UPDATE_FIELDS,
        )

    async def handle_updated(
        self, payload: JobPayload, job_id: str, company: Company
    ) -> EventOutcome:
        return await self._reconcile(
            EventKind.UPDATED,
            payload,
            job_id,
            company,
            status=JobStatus.CREATED,
            overwrite=UPDATE_FIELDS,
        )

    async def handle_canceled(
        self, payload: JobPayload, job_id: str, company: Company
    ) -> EventOutcome:
        return await self._reconcile(
            EventKind.CANCELED,
            payload,
            job_id,
            company,
            status=JobStatus.CANCELED,
            overwrite=CANCELED_FIELDS,
        )

    async def handle_completed(
        self, payload: JobPayload, job_id: str, company: Company
    ) -> EventOutcome:
        return await self._reconcile(
            EventKind.COMPLETED,
            payload,
            job_id,
            company,
            status=JobStatus.COMPLETED,
            overwrite=COMPLETED_FIELDS,
        )

    async def handle_deleted(
        self, payload: JobPayload, job_id: str, company: Company
    ) -> EventOutcome:
        """Cancel the job's component; the deletion body is too thin for matching."""

        del payload
        now = self.clock()
        record = await self._locate_parent(company.id, job_id)
        if record is None or not mark_canceled(record, job_id=job_id, now=now):
            log.info(f"Deleted job {job_id} has no stored record to cancel")
            await self.collaborators.calculate_revenue_loss(
                job_id, record, JobStatus.CANCELED, None, company
            )
            return EventOutcome(
                kind=EventKind.DELETED,
                job_id=job_id,
                action=OutcomeAction.IGNORED,
                record=record,
            )

        await self.repositories.jobs.update_fields(record.id, _mirrored_fields(record))
        await self.collaborators.calculate_revenue_loss(
            job_id, record, JobStatus.CANCELED, None, company
        )
        return EventOutcome(
            kind=EventKind.DELETED,
            job_id=job_id,
            action=OutcomeAction.CANCELED,
            record=record,
            linked_call_id=record.linked_call_id,
        )

    async def _reconcile(
        self,
        kind: EventKind,
        payload: JobPayload,
        job_id: str,
        company: Company,
        *,
        status: JobStatus,
        overwrite: Collection[str],
    ) -> EventOutcome:
        timestamps = normalize_event_timestamps(payload, clock=self.clock)
        now = self.clock()
        component = build_component(payload, job_id, status=status, timestamps=timestamps)

        phone_numbers = collect_phone_numbers(
            payload.customer, normalize=self.collaborators.normalize_phone
        )
        candidates = await retrieve_candidate_calls(
            self.repositories.calls,
            company_id=company.id,
            phone_numbers=phone_numbers,
            reference=timestamps.created_at,
            window_days=self.config.call_window_days,
        )
        match = await self.collaborators.match_best_call(
            candidates,
            timestamps.created_at,
            self._is_linked_for(company.id),
            self.config.match_source,
            job_id,
        )
        call = snapshot_call(match.call)
        average = await self._historical_average(company, timestamps.created_at)
        existing = await self._locate_parent(company.id, job_id)

        if existing is not None:
            record = await self._merge_existing(
                existing, component, job_id=job_id, now=now, overwrite=overwrite, match=match
            )
            action = OutcomeAction.COMBINED
        elif call is not None:
            record = await self._insert_record(
                payload,
                component,
                company,
                average=average,
                linked_call_id=call.id,
                match_reason=match.reason,
                match_details=dict(match.details),
                combined=True,
            )
            action = OutcomeAction.CREATED
        else:
            record, action = await self._combine_linked_or_create(
                payload,
                component,
                company,
                job_id=job_id,
                now=now,
                overwrite=overwrite,
                candidates=candidates,
                job_timestamp=timestamps.created_at,
                average=average,
                match=match,
            )

        await reconcile_qualification_tags(
            self.repositories.calls,
            record.linked_call_id,
            excluded_tags=self.config.excluded_tags,
            tag=self.config.later_qualified_tag,
        )
        await self.collaborators.calculate_revenue_loss(job_id, record, status, call, company)
        return EventOutcome(
            kind=kind,
            job_id=job_id,
            action=action,
            record=record,
            linked_call_id=record.linked_call_id,
        )

    async def _merge_existing(
        self,
        record: ParentJobRecord,
        component: JobComponent,
        *,
        job_id: str,
        now: datetime,
        overwrite: Collection[str],
        match: MatchResult,
    ) -> ParentJobRecord:
        combine_component(record, component, job_id=job_id, now=now, overwrite=overwrite)
        if record.linked_call_id is None and match.call is not None:
            record.linked_call_id = match.call.id
            record.match_reason = match.reason
            record.match_details = dict(match.details)
        await self.repositories.jobs.save(record)
        return record

    async def _combine_linked_or_create(
        self,
        payload: JobPayload,
        component: JobComponent,
        company: Company,
        *,
        job_id: str,
        now: datetime,
        overwrite: Collection[str],
        candidates: Sequence[CallRecord],
        job_timestamp: datetime,
        average: HistoricalAverageSnapshot | None,
        match: MatchResult,
    ) -> tuple[ParentJobRecord, OutcomeAction]:
        linked = await find_linked_job(
            self.repositories.jobs,
            candidates,
            job_timestamp=job_timestamp,
            company_id=company.id,
            qualified_tags=self.config.qualified_tags,
            max_age_days=self.config.linked_job_max_age_days,
        )
        if linked is not None:
            record = linked.record
            combine_component(record, component, job_id=job_id, now=now, overwrite=overwrite)
            if record.linked_call_id is None:
                record.linked_call_id = linked.call.id
                record.match_reason = MatchReason.LINKED_JOB
            await self.repositories.jobs.save(record)
            return record, OutcomeAction.COMBINED

        details: dict[str, object] = {
            "calls_found": len(candidates),
            "matcher_reason": match.reason,
            **match.details,
        }
        record = await self._insert_record(
            payload,
            component,
            company,
            average=average,
            linked_call_id=None,
            match_reason=MatchReason.NO_MATCH,
            match_details=details,
            combined=False,
        )
        return record, OutcomeAction.CREATED

    async def _insert_record(
        self,
        payload: JobPayload,
        component: JobComponent,
        company: Company,
        *,
        average: HistoricalAverageSnapshot | None,
        linked_call_id: str | None,
        match_reason: str,
        match_details: dict[str, object],
        combined: bool,
    ) -> ParentJobRecord:
        record = ParentJobRecord(
            job_id=component.job_id,
            company_id=company.id,
            linked_call_id=linked_call_id,
            match_reason=match_reason,
            match_details=match_details,
            components=[component] if combined else None,
            revenue=component.revenue,
            address=payload.address,
            location=await self._geocode(payload.address),
            average=average,
        )
        mirror_primary(record, component)
        return await self.repositories.jobs.insert(record)

    async def _locate_parent(self, company_id: str, job_id: str) -> ParentJobRecord | None:
        jobs = self.repositories.jobs
        record = await jobs.find_by_job_id(company_id=company_id, job_id=job_id)
        if record is not None:
            return record
        return await jobs.find_containing_job_id(company_id=company_id, job_id=job_id)

    async def _historical_average(
        self, company: Company, instant: datetime
    ) -> HistoricalAverageSnapshot | None:
        store = self.repositories.historical_averages
        snapshot = await store.find_exact(
            company_id=company.id, snapshot_date=company.local_date(instant)
        )
        if snapshot is not None:
            return snapshot
        return await store.find_most_recent(company_id=company.id)

    async def _geocode(self, address: Address | None) -> GeoPoint | None:
        if self.collaborators.geocode is None or address is None or not address.as_query():
            return None
        return await self.collaborators.geocode(address)

    def _is_linked_for(self, company_id: str) -> IsCallLinked:
        jobs = self.repositories.jobs
        estimates = self.repositories.estimates

        async def is_linked(call_id: str) -> bool:
            if await jobs.find_linked_to_call(company_id=company_id, call_id=call_id) is not None:
                return True
            estimate = await estimates.find_linked_to_call(company_id=company_id, call_id=call_id)
            return estimate is not None

        return is_linked


EVENT_HANDLERS: Final[dict[EventKind, Handler]] = {
    EventKind.CREATED: JobEventProcessor.handle_created,
    EventKind.UPDATED: JobEventProcessor.handle_updated,
    EventKind.CANCELED: JobEventProcessor.handle_canceled,
    EventKind.COMPLETED: JobEventProcessor.handle_completed,
    EventKind.DELETED: JobEventProcessor.handle_deleted,
}

if EVENT_HANDLERS.keys() != set(EventKind):
    raise RuntimeError("Every EventKind needs a handler")

"""In-memory async stand-ins for the reconciliation stores and collaborators."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from jobsync.domain.model import MatchResult
from jobsync.domain.ports import ReconciliationRepositories

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date
    from types import TracebackType
    from uuid import UUID

    from jobsync.domain.model import (
        CallRecord,
        Company,
        HistoricalAverageSnapshot,
        JobStatus,
        ParentJobRecord,
    )
    from jobsync.domain.ports import IsCallLinked
    from jobsync.domain.time_windows import TimeWindow


class FakeCallStore:
    def __init__(self, calls: Iterable[CallRecord] = ()) -> None:
        self.calls: dict[str, CallRecord] = {call.id: call for call in calls}
        self.queried_numbers: list[str] = []

    def add(self, call: CallRecord) -> None:
        self.calls[call.id] = call

    async def find_in_window(
        self,
        *,
        company_id: str,
        phone_number: str,
        window: TimeWindow,
    ) -> list[CallRecord]:
        self.queried_numbers.append(phone_number)
        return [
            call
            for call in self.calls.values()
            if call.company_id == company_id
            and call.phone_number == phone_number
            and window.contains(call.created_at)
        ]

    async def append_tag_unless_present(
        self,
        call_id: str,
        *,
        excluded_tags: Iterable[str],
        tag: str,
    ) -> bool:
        call = self.calls.get(call_id)
        if call is None or call.has_any_tag([*excluded_tags, tag]):
            return False
        self.calls[call_id] = replace(call, tags=(*call.tags, tag))
        return True

    def tags_of(self, call_id: str) -> tuple[str, ...]:
        return self.calls[call_id].tags


class FakeJobStore:
    """Keeps private copies so only explicit writes change stored state."""

    def __init__(self) -> None:
        self.records: dict[UUID, ParentJobRecord] = {}
        self.saves = 0
        self.field_updates: list[tuple[UUID, dict[str, object]]] = []

    def seed(self, record: ParentJobRecord) -> ParentJobRecord:
        self.records[record.id] = deepcopy(record)
        return record

    async def find_by_job_id(self, *, company_id: str, job_id: str) -> ParentJobRecord | None:
        for record in self.records.values():
            if record.company_id == company_id and record.job_id == job_id:
                return deepcopy(record)
        return None

    async def find_containing_job_id(
        self, *, company_id: str, job_id: str
    ) -> ParentJobRecord | None:
        for record in self.records.values():
            if record.company_id == company_id and record.contains_job(job_id):
                return deepcopy(record)
        return None

    async def find_linked_to_call(
        self, *, company_id: str, call_id: str
    ) -> ParentJobRecord | None:
        linked = [
            record
            for record in self.records.values()
            if record.company_id == company_id and record.linked_call_id == call_id
        ]
        if not linked:
            return None
        newest = max(linked, key=lambda record: record.created_at or EPOCH)
        return deepcopy(newest)

    async def insert(self, record: ParentJobRecord) -> ParentJobRecord:
        self.records[record.id] = deepcopy(record)
        return record

    async def save(self, record: ParentJobRecord) -> None:
        self.saves += 1
        self.records[record.id] = deepcopy(record)

    async def update_fields(self, record_id: UUID, fields: dict[str, object]) -> None:
        self.field_updates.append((record_id, dict(fields)))
        self.records[record_id] = replace(self.records[record_id], **deepcopy(fields))

    def only(self) -> ParentJobRecord:
        assert len(self.records) == 1, f"expected one record, found {len(self.records)}"
        return next(iter(self.records.values()))


class FakeEstimateStore:
    def __init__(self, links: dict[str, str] | None = None) -> None:
        # call id -> estimate id
        self.links = dict(links or {})

    async def find_linked_to_call(self, *, company_id: str, call_id: str) -> str | None:
        _ = company_id
        return self.links.get(call_id)


class FakeHistoricalAverageStore:
    def __init__(self, snapshots: Iterable[HistoricalAverageSnapshot] = ()) -> None:
        self.snapshots = list(snapshots)

    async def find_exact(
        self, *, company_id: str, snapshot_date: date
    ) -> HistoricalAverageSnapshot | None:
        for snapshot in self.snapshots:
            if snapshot.company_id == company_id and snapshot.snapshot_date == snapshot_date:
                return snapshot
        return None

    async def find_most_recent(self, *, company_id: str) -> HistoricalAverageSnapshot | None:
        own = [snapshot for snapshot in self.snapshots if snapshot.company_id == company_id]
        return max(own, key=lambda snapshot: snapshot.snapshot_date) if own else None


@dataclass
class FakeRepositories:
    calls: FakeCallStore = field(default_factory=FakeCallStore)
    jobs: FakeJobStore = field(default_factory=FakeJobStore)
    estimates: FakeEstimateStore = field(default_factory=FakeEstimateStore)
    historical_averages: FakeHistoricalAverageStore = field(
        default_factory=FakeHistoricalAverageStore
    )

    def bundle(self) -> ReconciliationRepositories:
        return ReconciliationRepositories(
            calls=self.calls,
            jobs=self.jobs,
            estimates=self.estimates,
            historical_averages=self.historical_averages,
        )


class FakeUnitOfWork:
    def __init__(self, repositories: FakeRepositories) -> None:
        self._repositories = repositories
        self.commits = 0
        self.rollbacks = 0

    @property
    def repositories(self) -> ReconciliationRepositories:
        return self._repositories.bundle()

    async def __aenter__(self) -> FakeUnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            await self.rollback()
        return False

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


@dataclass
class MatcherCall:
    candidate_ids: list[str]
    job_instant: datetime
    source: str
    job_id: str
    linked: dict[str, bool]


class FakeMatcher:
    """Returns a fixed call (or none) and records what it was asked."""

    def __init__(
        self,
        call: CallRecord | None = None,
        *,
        reason: str = "best_score",
        details: dict[str, object] | None = None,
    ) -> None:
        self.call = call
        self.reason = reason
        self.details = dict(details or {})
        self.invocations: list[MatcherCall] = []

    async def __call__(
        self,
        candidates: Sequence[CallRecord],
        job_instant: datetime,
        is_linked: IsCallLinked,
        source: str,
        job_id: str,
    ) -> MatchResult:
        linked = {call.id: await is_linked(call.id) for call in candidates}
        self.invocations.append(
            MatcherCall(
                candidate_ids=[call.id for call in candidates],
                job_instant=job_instant,
                source=source,
                job_id=job_id,
                linked=linked,
            )
        )
        reason = self.reason if self.call is not None else "no_candidates"
        return MatchResult(call=self.call, reason=reason, details=dict(self.details))


@dataclass
class RevenueLossCall:
    job_id: str
    record: ParentJobRecord | None
    status: JobStatus
    call: CallRecord | None
    company: Company


class RevenueLossSpy:
    def __init__(self) -> None:
        self.calls: list[RevenueLossCall] = []

    async def __call__(
        self,
        job_id: str,
        record: ParentJobRecord | None,
        status: JobStatus,
        call: CallRecord | None,
        company: Company,
    ) -> None:
        self.calls.append(RevenueLossCall(job_id, record, status, call, company))


# Importable by reference ("tests.helpers.stores:match_nothing") for CLI replays.
match_nothing = FakeMatcher()

"""Ports for the stores the reconciliation core reads and writes.

All store access is asynchronous; implementations are awaited one call at a time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date
    from uuid import UUID

    from jobsync.domain.model import CallRecord, HistoricalAverageSnapshot, ParentJobRecord
    from jobsync.domain.time_windows import TimeWindow


@runtime_checkable
class CallStore(Protocol):
    """Read access to tracked calls plus conditional tag updates."""

    async def find_in_window(
        self,
        *,
        company_id: str,
        phone_number: str,
        window: TimeWindow,
    ) -> list[CallRecord]: ...

    async def append_tag_unless_present(
        self,
        call_id: str,
        *,
        excluded_tags: Iterable[str],
        tag: str,
    ) -> bool:
        """Add ``tag`` unless one of ``excluded_tags`` is present; return whether it was added."""
        ...


@runtime_checkable
class JobStore(Protocol):
    """Persistence contract for parent job records."""

    async def find_by_job_id(self, *, company_id: str, job_id: str) -> ParentJobRecord | None:
        """Exact match on the (possibly combined) job id."""
        ...

    async def find_containing_job_id(
        self, *, company_id: str, job_id: str
    ) -> ParentJobRecord | None:
        """Record whose combined id lists ``job_id`` among its parts."""
        ...

    async def find_linked_to_call(
        self, *, company_id: str, call_id: str
    ) -> ParentJobRecord | None:
        """Most recently created record linked to ``call_id``."""
        ...

    async def insert(self, record: ParentJobRecord) -> ParentJobRecord: ...

    async def save(self, record: ParentJobRecord) -> None:
        """Whole-record write keyed by ``record.id``."""
        ...

    async def update_fields(self, record_id: UUID, fields: dict[str, object]) -> None: ...


@runtime_checkable
class EstimateStore(Protocol):
    async def find_linked_to_call(self, *, company_id: str, call_id: str) -> str | None:
        """Return the id of an estimate linked to ``call_id``, if any."""
        ...


@runtime_checkable
class HistoricalAverageStore(Protocol):
    async def find_exact(
        self, *, company_id: str, snapshot_date: date
    ) -> HistoricalAverageSnapshot | None: ...

    async def find_most_recent(self, *, company_id: str) -> HistoricalAverageSnapshot | None: ...

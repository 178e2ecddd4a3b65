"""Ports for the external collaborators the reconciliation core delegates to."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from jobsync.domain.model import (
        Address,
        CallRecord,
        Company,
        GeoPoint,
        JobStatus,
        MatchResult,
        ParentJobRecord,
    )

type IsCallLinked = Callable[[str], Awaitable[bool]]
type PhoneNormalizer = Callable[[str], str]


@runtime_checkable
class BestCallMatcher(Protocol):
    """Scores candidate calls against a job; owned outside this service."""

    async def __call__(
        self,
        candidates: Sequence[CallRecord],
        job_instant: datetime,
        is_linked: IsCallLinked,
        source: str,
        job_id: str,
    ) -> MatchResult: ...


@runtime_checkable
class RevenueLossCalculator(Protocol):
    async def __call__(
        self,
        job_id: str,
        record: ParentJobRecord | None,
        status: JobStatus,
        call: CallRecord | None,
        company: Company,
    ) -> None: ...


@runtime_checkable
class Geocoder(Protocol):
    async def __call__(self, address: Address) -> GeoPoint | None: ...

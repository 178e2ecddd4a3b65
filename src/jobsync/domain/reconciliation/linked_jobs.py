"""Fallback search for an existing job already linked to one of the candidate calls.

Qualified calls are scanned before non-qualified ones, each partition most recent
first. The first linked job created no later than the new job and at most
``max_age_days`` before it wins; qualified hits beat non-qualified ones regardless
of recency.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from jobsync.domain.time_windows import ensure_aware, is_within_days_before

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from jobsync.domain.model import CallRecord, ParentJobRecord
    from jobsync.domain.ports import JobStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LinkedJobMatch:
    record: ParentJobRecord
    call: CallRecord


def partition_by_qualification(
    calls: Iterable[CallRecord],
    qualified_tags: Sequence[str],
) -> tuple[list[CallRecord], list[CallRecord]]:
    """Split into (qualified, non-qualified), each sorted newest first."""

    qualified: list[CallRecord] = []
    others: list[CallRecord] = []
    for call in calls:
        (qualified if call.has_any_tag(qualified_tags) else others).append(call)

    def _newest_first(call: CallRecord) -> datetime:
        return ensure_aware(call.created_at)

    qualified.sort(key=_newest_first, reverse=True)
    others.sort(key=_newest_first, reverse=True)
    return qualified, others


async def find_linked_job(
    jobs: JobStore,
    candidates: Sequence[CallRecord],
    *,
    job_timestamp: datetime,
    company_id: str,
    qualified_tags: Sequence[str],
    max_age_days: int,
) -> LinkedJobMatch | None:
    qualified, others = partition_by_qualification(candidates, qualified_tags)
    for call in (*qualified, *others):
        record = await jobs.find_linked_to_call(company_id=company_id, call_id=call.id)
        if record is None or record.created_at is None:
            continue
        if is_within_days_before(record.created_at, job_timestamp, days=max_age_days):
            log.info(f"Call {call.id} links to existing job {record.job_id}")
            return LinkedJobMatch(record=record, call=call)
    return None

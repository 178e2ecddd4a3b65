"""Repository implementations backed by SQLAlchemy async sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update

from jobsync.adapters.sqlalchemy.mappings import (
    call_record_table,
    estimate_table,
    historical_average_table,
    job_record_table,
)
from jobsync.adapters.sqlalchemy.serialization import (
    call_to_row,
    fields_to_columns,
    record_to_row,
    row_to_average,
    row_to_call,
    row_to_record,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

    from jobsync.domain.model import CallRecord, HistoricalAverageSnapshot, ParentJobRecord
    from jobsync.domain.time_windows import TimeWindow


def _folded(tags: Iterable[str]) -> set[str]:
    return {tag.strip().casefold() for tag in tags}


class SqlAlchemyCallStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, call: CallRecord) -> None:
        await self.session.execute(insert(call_record_table).values(**call_to_row(call)))

    async def find_in_window(
        self,
        *,
        company_id: str,
        phone_number: str,
        window: TimeWindow,
    ) -> list[CallRecord]:
        stmt = (
            select(call_record_table)
            .where(call_record_table.c.company_id == company_id)
            .where(call_record_table.c.phone_number == phone_number)
            .where(call_record_table.c.created_at >= window.start)
            .where(call_record_table.c.created_at < window.end)
            .order_by(call_record_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_call(row) for row in result.mappings()]

    async def append_tag_unless_present(
        self,
        call_id: str,
        *,
        excluded_tags: Iterable[str],
        tag: str,
    ) -> bool:
        stmt = select(call_record_table.c.tags).where(call_record_table.c.id == call_id)
        current = (await self.session.execute(stmt)).scalar_one_or_none()
        if current is None:
            return False
        present = _folded(current)
        if present & _folded([*excluded_tags, tag]):
            return False
        await self.session.execute(
            update(call_record_table)
            .where(call_record_table.c.id == call_id)
            .values(tags=[*current, tag])
        )
        return True


class SqlAlchemyJobStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_job_id(self, *, company_id: str, job_id: str) -> ParentJobRecord | None:
        stmt = (
            select(job_record_table)
            .where(job_record_table.c.company_id == company_id)
            .where(job_record_table.c.job_id == job_id)
            .limit(1)
        )
        row = (await self.session.execute(stmt)).mappings().first()
        return None if row is None else row_to_record(row)

    async def find_containing_job_id(
        self, *, company_id: str, job_id: str
    ) -> ParentJobRecord | None:
        # LIKE narrows the scan; membership is confirmed on the split id list.
        stmt = (
            select(job_record_table)
            .where(job_record_table.c.company_id == company_id)
            .where(job_record_table.c.job_id.contains(job_id, autoescape=True))
            .order_by(job_record_table.c.created_at.desc())
        )
        result = await self.session.execute(stmt)
        for row in result.mappings():
            record = row_to_record(row)
            if record.contains_job(job_id):
                return record
        return None

    async def find_linked_to_call(
        self, *, company_id: str, call_id: str
    ) -> ParentJobRecord | None:
        stmt = (
            select(job_record_table)
            .where(job_record_table.c.company_id == company_id)
            .where(job_record_table.c.linked_call_id == call_id)
            .order_by(job_record_table.c.created_at.desc())
            .limit(1)
        )
        row = (await self.session.execute(stmt)).mappings().first()
        return None if row is None else row_to_record(row)

    async def insert(self, record: ParentJobRecord) -> ParentJobRecord:
        await self.session.execute(insert(job_record_table).values(**record_to_row(record)))
        return record

    async def save(self, record: ParentJobRecord) -> None:
        row = record_to_row(record)
        row.pop("id")
        await self.session.execute(
            update(job_record_table).where(job_record_table.c.id == record.id).values(**row)
        )

    async def update_fields(self, record_id: UUID, fields: dict[str, object]) -> None:
        if not fields:
            return
        await self.session.execute(
            update(job_record_table)
            .where(job_record_table.c.id == record_id)
            .values(**fields_to_columns(fields))
        )


class SqlAlchemyEstimateStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(
        self,
        *,
        estimate_id: str,
        company_id: str,
        linked_call_id: str | None,
        created_at: datetime | None = None,
    ) -> None:
        await self.session.execute(
            insert(estimate_table).values(
                id=estimate_id,
                company_id=company_id,
                linked_call_id=linked_call_id,
                created_at=created_at,
            )
        )

    async def find_linked_to_call(self, *, company_id: str, call_id: str) -> str | None:
        stmt = (
            select(estimate_table.c.id)
            .where(estimate_table.c.company_id == company_id)
            .where(estimate_table.c.linked_call_id == call_id)
            .limit(1)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none()


class SqlAlchemyHistoricalAverageStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, snapshot: HistoricalAverageSnapshot) -> None:
        await self.session.execute(
            insert(historical_average_table).values(
                company_id=snapshot.company_id,
                snapshot_date=snapshot.snapshot_date,
                overall_average_revenue=snapshot.overall_average_revenue,
                source_averages=dict(snapshot.source_averages),
                sub_source_averages=dict(snapshot.sub_source_averages),
            )
        )

    async def find_exact(
        self, *, company_id: str, snapshot_date: date
    ) -> HistoricalAverageSnapshot | None:
        stmt = (
            select(historical_average_table)
            .where(historical_average_table.c.company_id == company_id)
            .where(historical_average_table.c.snapshot_date == snapshot_date)
        )
        row = (await self.session.execute(stmt)).mappings().first()
        return None if row is None else row_to_average(row)

    async def find_most_recent(self, *, company_id: str) -> HistoricalAverageSnapshot | None:
        stmt = (
            select(historical_average_table)
            .where(historical_average_table.c.company_id == company_id)
            .order_by(historical_average_table.c.snapshot_date.desc())
            .limit(1)
        )
        row = (await self.session.execute(stmt)).mappings().first()
        return None if row is None else row_to_average(row)

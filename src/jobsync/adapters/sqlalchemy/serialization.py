"""Conversion between domain dataclasses and table rows.

Nested values live in JSON columns and go through pydantic ``TypeAdapter``s so
datetimes, enums and tuples survive the round trip.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields
from typing import Any, Final

from pydantic import TypeAdapter

from jobsync.domain.model import (
    Address,
    AssignedEmployee,
    CallRecord,
    CustomerSnapshot,
    GeoPoint,
    HistoricalAverageSnapshot,
    JobComponent,
    ParentJobRecord,
    Schedule,
)

_JSON_ADAPTERS: Final[dict[str, TypeAdapter[Any]]] = {
    "components": TypeAdapter(list[JobComponent]),
    "schedule": TypeAdapter(Schedule),
    "customer": TypeAdapter(CustomerSnapshot),
    "assigned_employees": TypeAdapter(tuple[AssignedEmployee, ...]),
    "address": TypeAdapter(Address),
    "location": TypeAdapter(GeoPoint),
    "average": TypeAdapter(HistoricalAverageSnapshot),
    "match_details": TypeAdapter(dict[str, Any]),
}

RECORD_FIELDS: Final[frozenset[str]] = frozenset(f.name for f in fields(ParentJobRecord))


def fields_to_columns(values: Mapping[str, object]) -> dict[str, object]:
    """Column values for a subset of ``ParentJobRecord`` fields."""

    unknown = values.keys() - RECORD_FIELDS
    if unknown:
        raise KeyError(f"Unknown job record fields: {', '.join(sorted(unknown))}")
    columns: dict[str, object] = {}
    for name, value in values.items():
        adapter = _JSON_ADAPTERS.get(name)
        if adapter is None or value is None:
            columns[name] = value
            continue
        columns[name] = adapter.dump_python(value, mode="json")
    return columns


def record_to_row(record: ParentJobRecord) -> dict[str, object]:
    return fields_to_columns({name: getattr(record, name) for name in RECORD_FIELDS})


def row_to_record(row: Mapping[str, Any]) -> ParentJobRecord:
    values: dict[str, Any] = {}
    for name in RECORD_FIELDS:
        value = row[name]
        adapter = _JSON_ADAPTERS.get(name)
        values[name] = value if adapter is None or value is None else adapter.validate_python(value)
    return ParentJobRecord(**values)


def row_to_call(row: Mapping[str, Any]) -> CallRecord:
    return CallRecord(
        id=row["id"],
        company_id=row["company_id"],
        phone_number=row["phone_number"],
        created_at=row["created_at"],
        tags=tuple(row["tags"] or ()),
        duration_seconds=row["duration_seconds"],
    )


def call_to_row(call: CallRecord) -> dict[str, object]:
    return {
        "id": call.id,
        "company_id": call.company_id,
        "phone_number": call.phone_number,
        "created_at": call.created_at,
        "tags": list(call.tags),
        "duration_seconds": call.duration_seconds,
    }


def row_to_average(row: Mapping[str, Any]) -> HistoricalAverageSnapshot:
    return HistoricalAverageSnapshot(
        company_id=row["company_id"],
        snapshot_date=row["snapshot_date"],
        overall_average_revenue=row["overall_average_revenue"],
        source_averages=dict(row["source_averages"] or {}),
        sub_source_averages=dict(row["sub_source_averages"] or {}),
    )

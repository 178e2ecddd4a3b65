"""SQLAlchemy table metadata for the jobsync stores."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)

from jobsync.domain.model import JobStatus


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

call_record_table = Table(
    "call_record",
    metadata,
    Column("id", String, primary_key=True),
    Column("company_id", String, nullable=False),
    Column("phone_number", String, nullable=False),
    Column("created_at", UTCDateTime, nullable=False),
    Column("tags", JSON, nullable=False, default=list),
    Column("duration_seconds", Integer, nullable=True),
    Index("ix_call_record_lookup", "company_id", "phone_number", "created_at"),
)

job_record_table = Table(
    "job_record",
    metadata,
    Column("id", Uuid, primary_key=True),
    Column("job_id", String, nullable=False, index=True),
    Column("company_id", String, nullable=False, index=True),
    Column("linked_call_id", String, nullable=True, index=True),
    Column("match_reason", String, nullable=True),
    Column("match_details", JSON, nullable=False, default=dict),
    Column("components", JSON, nullable=True),
    Column("revenue", Float, nullable=False, default=0.0),
    Column(
        "status",
        Enum(
            JobStatus,
            native_enum=False,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
    ),
    Column("schedule", JSON, nullable=True),
    Column("customer", JSON, nullable=True),
    Column("assigned_employees", JSON, nullable=False, default=list),
    Column("category", String, nullable=False),
    Column("job_type", String, nullable=False, default=""),
    Column("created_at", UTCDateTime, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
    Column("completed_at", UTCDateTime, nullable=True),
    Column("address", JSON, nullable=True),
    Column("location", JSON, nullable=True),
    Column("average", JSON, nullable=True),
)

estimate_table = Table(
    "estimate",
    metadata,
    Column("id", String, primary_key=True),
    Column("company_id", String, nullable=False, index=True),
    Column("linked_call_id", String, nullable=True, index=True),
    Column("created_at", UTCDateTime, nullable=True),
)

historical_average_table = Table(
    "historical_average",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("company_id", String, nullable=False),
    Column("snapshot_date", Date, nullable=False),
    Column("overall_average_revenue", Float, nullable=False),
    Column("source_averages", JSON, nullable=False, default=dict),
    Column("sub_source_averages", JSON, nullable=False, default=dict),
    UniqueConstraint("company_id", "snapshot_date"),
)

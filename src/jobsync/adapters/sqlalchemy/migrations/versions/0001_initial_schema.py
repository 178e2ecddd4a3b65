"""Initial reconciliation schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from jobsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

_JOB_STATUSES = ("created", "updated", "completed", "canceled")


def upgrade() -> None:
    op.create_table(
        "call_record",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("phone_number", sa.String(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_call_record")),
    )
    op.create_index(
        "ix_call_record_lookup",
        "call_record",
        ["company_id", "phone_number", "created_at"],
    )

    op.create_table(
        "job_record",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("job_id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("linked_call_id", sa.String(), nullable=True),
        sa.Column("match_reason", sa.String(), nullable=True),
        sa.Column("match_details", sa.JSON(), nullable=False),
        sa.Column("components", sa.JSON(), nullable=True),
        sa.Column("revenue", sa.Float(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_JOB_STATUSES, name="jobstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("schedule", sa.JSON(), nullable=True),
        sa.Column("customer", sa.JSON(), nullable=True),
        sa.Column("assigned_employees", sa.JSON(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("job_type", sa.String(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=True),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.Column("completed_at", UTCDateTime(), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("location", sa.JSON(), nullable=True),
        sa.Column("average", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_job_record")),
    )
    op.create_index(op.f("ix_job_record_job_id"), "job_record", ["job_id"])
    op.create_index(op.f("ix_job_record_company_id"), "job_record", ["company_id"])
    op.create_index(op.f("ix_job_record_linked_call_id"), "job_record", ["linked_call_id"])

    op.create_table(
        "estimate",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("linked_call_id", sa.String(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_estimate")),
    )
    op.create_index(op.f("ix_estimate_company_id"), "estimate", ["company_id"])
    op.create_index(op.f("ix_estimate_linked_call_id"), "estimate", ["linked_call_id"])

    op.create_table(
        "historical_average",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("company_id", sa.String(), nullable=False),
        sa.Column("snapshot_date", sa.Date(), nullable=False),
        sa.Column("overall_average_revenue", sa.Float(), nullable=False),
        sa.Column("source_averages", sa.JSON(), nullable=False),
        sa.Column("sub_source_averages", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_historical_average")),
        sa.UniqueConstraint(
            "company_id",
            "snapshot_date",
            name=op.f("uq_historical_average_company_id"),
        ),
    )


def downgrade() -> None:
    op.drop_table("historical_average")
    op.drop_index(op.f("ix_estimate_linked_call_id"), table_name="estimate")
    op.drop_index(op.f("ix_estimate_company_id"), table_name="estimate")
    op.drop_table("estimate")
    op.drop_index(op.f("ix_job_record_linked_call_id"), table_name="job_record")
    op.drop_index(op.f("ix_job_record_company_id"), table_name="job_record")
    op.drop_index(op.f("ix_job_record_job_id"), table_name="job_record")
    op.drop_table("job_record")
    op.drop_index("ix_call_record_lookup", table_name="call_record")
    op.drop_table("call_record")

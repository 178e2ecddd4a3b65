"""SQLAlchemy (async) persistence adapter."""

from __future__ import annotations

from .mappings import (
    call_record_table,
    estimate_table,
    historical_average_table,
    job_record_table,
    metadata,
)
from .repositories import (
    SqlAlchemyCallStore,
    SqlAlchemyEstimateStore,
    SqlAlchemyHistoricalAverageStore,
    SqlAlchemyJobStore,
)

__all__ = [
    "SqlAlchemyCallStore",
    "SqlAlchemyEstimateStore",
    "SqlAlchemyHistoricalAverageStore",
    "SqlAlchemyJobStore",
    "call_record_table",
    "estimate_table",
    "historical_average_table",
    "job_record_table",
    "metadata",
]

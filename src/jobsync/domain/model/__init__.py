"""Domain model for job/call reconciliation."""

from __future__ import annotations

from .averages import HistoricalAverageSnapshot
from .calls import CallRecord
from .company import Company
from .enums import JobStatus, MatchReason
from .jobs import (
    COMBINED_ID_SEPARATOR,
    COMPONENT_FIELDS,
    UNKNOWN_CATEGORY,
    Address,
    AssignedEmployee,
    CustomerSnapshot,
    GeoPoint,
    JobComponent,
    JobPayload,
    ParentJobRecord,
    Schedule,
)
from .matching import MatchResult

__all__ = [
    "COMBINED_ID_SEPARATOR",
    "COMPONENT_FIELDS",
    "UNKNOWN_CATEGORY",
    "Address",
    "AssignedEmployee",
    "CallRecord",
    "Company",
    "CustomerSnapshot",
    "GeoPoint",
    "HistoricalAverageSnapshot",
    "JobComponent",
    "JobPayload",
    "JobStatus",
    "MatchReason",
    "MatchResult",
    "ParentJobRecord",
    "Schedule",
]

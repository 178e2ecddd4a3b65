"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class JobStatus(StrEnum):
    CREATED = "created"
    # legacy tier written by older deliveries; mirrored onto parents as CREATED
    UPDATED = "updated"
    COMPLETED = "completed"
    CANCELED = "canceled"


class MatchReason(StrEnum):
    """Diagnostic codes this service writes itself.

    Codes produced by the external call matcher are stored verbatim.
    """

    NO_MATCH = "no_match"
    LINKED_JOB = "linked_job"

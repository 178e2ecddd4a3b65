"""Reconciliation core linking job events to inbound calls.

Flow per event:
1) validate timestamps
2) collect candidate calls around the job's creation instant
3) ask the external matcher for the best call
4) without a direct match, look for a job already linked to a candidate call
5) merge the job into its parent record and refresh the primary component
6) tag the linked call as qualified after the fact
"""

from __future__ import annotations

from .candidates import collect_phone_numbers, deduplicate_calls, retrieve_candidate_calls
from .combine import combine_component, ensure_components, mark_canceled
from .dispatcher import (
    Collaborators,
    EventKind,
    EventOutcome,
    JobEventProcessor,
    OutcomeAction,
)
from .linked_jobs import LinkedJobMatch, find_linked_job
from .locks import KeyedLock
from .primary import SelectionTier, mirror_primary, select_primary_component
from .tags import reconcile_qualification_tags
from .timestamps import InvalidTimestampError, parse_timestamp

__all__ = [
    "Collaborators",
    "EventKind",
    "EventOutcome",
    "InvalidTimestampError",
    "JobEventProcessor",
    "KeyedLock",
    "LinkedJobMatch",
    "OutcomeAction",
    "SelectionTier",
    "collect_phone_numbers",
    "combine_component",
    "deduplicate_calls",
    "ensure_components",
    "find_linked_job",
    "mark_canceled",
    "mirror_primary",
    "parse_timestamp",
    "reconcile_qualification_tags",
    "retrieve_candidate_calls",
    "select_primary_component",
]

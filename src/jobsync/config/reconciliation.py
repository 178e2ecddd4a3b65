"""Defaults and environment overrides for job/call reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_int, optional_env_list, optional_env_str

DEFAULT_CALL_WINDOW_DAYS = 31
DEFAULT_LINKED_JOB_MAX_AGE_DAYS = 30
DEFAULT_QUALIFIED_TAGS = ("qualified", "qualified lead", "booked", "booked job")
DEFAULT_LATER_QUALIFIED_TAG = "later qualified"
DEFAULT_EXCLUDED_TAGS = ("qualified", "qualified lead", "booked", "booked job")
DEFAULT_MATCH_SOURCE = "housecall_pro"


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    call_window_days: int = DEFAULT_CALL_WINDOW_DAYS
    linked_job_max_age_days: int = DEFAULT_LINKED_JOB_MAX_AGE_DAYS
    qualified_tags: tuple[str, ...] = DEFAULT_QUALIFIED_TAGS
    later_qualified_tag: str = DEFAULT_LATER_QUALIFIED_TAG
    excluded_tags: tuple[str, ...] = DEFAULT_EXCLUDED_TAGS
    match_source: str = DEFAULT_MATCH_SOURCE


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        call_window_days=optional_env_int("JOBSYNC_CALL_WINDOW_DAYS", DEFAULT_CALL_WINDOW_DAYS),
        linked_job_max_age_days=optional_env_int(
            "JOBSYNC_LINKED_JOB_MAX_AGE_DAYS", DEFAULT_LINKED_JOB_MAX_AGE_DAYS
        ),
        qualified_tags=optional_env_list("JOBSYNC_QUALIFIED_TAGS", DEFAULT_QUALIFIED_TAGS),
        later_qualified_tag=optional_env_str(
            "JOBSYNC_LATER_QUALIFIED_TAG", DEFAULT_LATER_QUALIFIED_TAG
        ),
        excluded_tags=optional_env_list("JOBSYNC_EXCLUDED_TAGS", DEFAULT_EXCLUDED_TAGS),
        match_source=optional_env_str("JOBSYNC_MATCH_SOURCE", DEFAULT_MATCH_SOURCE),
    )

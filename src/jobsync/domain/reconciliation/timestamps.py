"""Validation of job event timestamps."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger
from typing import TYPE_CHECKING

from jobsync.domain.time_windows import ensure_aware, utcnow

if TYPE_CHECKING:
    from jobsync.domain.model import JobPayload
    from jobsync.domain.time_windows import Clock

log = getLogger(__name__)

_UTC_SUFFIX = "Z"


class InvalidTimestampError(ValueError):
    """Raised when an event timestamp cannot be read as an instant."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Invalid {field} timestamp: {value!r}")
        self.field = field
        self.value = value


@dataclass(frozen=True, slots=True)
class EventTimestamps:
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None


def _parse_text(text: str) -> datetime | None:
    candidate = text.strip()
    if not candidate:
        return None
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(candidate)
    except (TypeError, ValueError, IndexError):
        return None


def parse_timestamp(value: str | datetime | None, *, field: str = "event") -> datetime:
    """Parse ``value`` into an aware UTC datetime.

    Text that does not parse as given is retried once with a UTC suffix; naive
    results are read as UTC.
    """

    if isinstance(value, datetime):
        return ensure_aware(value)
    if value is None:
        raise InvalidTimestampError(field, value)

    parsed = _parse_text(value)
    if parsed is None:
        parsed = _parse_text(f"{value.strip()}{_UTC_SUFFIX}")
    if parsed is None:
        raise InvalidTimestampError(field, value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_optional_timestamp(value: str | datetime | None) -> datetime | None:
    """Lenient variant for non-critical fields such as schedules."""

    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except InvalidTimestampError:
        return None


def normalize_event_timestamps(payload: JobPayload, *, clock: Clock = utcnow) -> EventTimestamps:
    created_at = parse_timestamp(payload.created_at, field="created_at")
    updated_at = (
        clock()
        if payload.updated_at is None
        else parse_timestamp(payload.updated_at, field="updated_at")
    )
    completed_at = parse_optional_timestamp(payload.completed_at)
    if completed_at is None and payload.completed_at is not None:
        log.warning(
            "Dropping unparseable completed_at %r for job %s",
            payload.completed_at,
            payload.job_id,
        )
    return EventTimestamps(created_at=created_at, updated_at=updated_at, completed_at=completed_at)

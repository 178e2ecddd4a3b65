"""Inbound call snapshots read from the call store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime


def _normalize_tag(tag: str) -> str:
    return tag.strip().lower()


@dataclass(frozen=True, slots=True, kw_only=True, eq=False)
class CallRecord:
    """One tracked inbound call. Identity is ``id``; content never decides equality."""

    id: str
    company_id: str
    phone_number: str
    created_at: datetime
    tags: tuple[str, ...] = field(default_factory=tuple)
    duration_seconds: int | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def has_any_tag(self, tags: Iterable[str]) -> bool:
        """Case-insensitive, whitespace-tolerant tag intersection."""

        wanted = {_normalize_tag(tag) for tag in tags}
        return any(_normalize_tag(tag) in wanted for tag in self.tags)

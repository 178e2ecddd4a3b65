"""Output of the external best-call matcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .calls import CallRecord


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult:
    call: CallRecord | None
    reason: str
    details: dict[str, object] = field(default_factory=dict[str, object])

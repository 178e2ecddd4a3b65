"""Historical revenue reference data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date  # noqa: TC003


@dataclass(frozen=True, slots=True, kw_only=True)
class HistoricalAverageSnapshot:
    company_id: str
    snapshot_date: date
    overall_average_revenue: float
    source_averages: dict[str, float] = field(default_factory=dict[str, float])
    sub_source_averages: dict[str, float] = field(default_factory=dict[str, float])

"""Domain port definitions for adapters."""

from __future__ import annotations

from .collaborators import (
    BestCallMatcher,
    Geocoder,
    IsCallLinked,
    PhoneNormalizer,
    RevenueLossCalculator,
)
from .persistence import CallStore, EstimateStore, HistoricalAverageStore, JobStore
from .unit_of_work import ReconciliationRepositories, ReconciliationUnitOfWork

__all__ = [
    "BestCallMatcher",
    "CallStore",
    "EstimateStore",
    "Geocoder",
    "HistoricalAverageStore",
    "IsCallLinked",
    "JobStore",
    "PhoneNormalizer",
    "ReconciliationRepositories",
    "ReconciliationUnitOfWork",
    "RevenueLossCalculator",
]

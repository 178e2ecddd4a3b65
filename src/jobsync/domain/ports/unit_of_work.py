"""Async unit-of-work boundary around the reconciliation stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from jobsync.domain.ports.persistence import (
        CallStore,
        EstimateStore,
        HistoricalAverageStore,
        JobStore,
    )


@dataclass(slots=True)
class ReconciliationRepositories:
    """Stores required to reconcile one job event."""

    calls: CallStore
    jobs: JobStore
    estimates: EstimateStore
    historical_averages: HistoricalAverageStore


@runtime_checkable
class ReconciliationUnitOfWork(Protocol):
    @property
    def repositories(self) -> ReconciliationRepositories: ...

    async def __aenter__(self) -> ReconciliationUnitOfWork: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

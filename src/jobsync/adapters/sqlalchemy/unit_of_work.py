"""SQLAlchemy-backed async unit of work for job event reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from jobsync.adapters.sqlalchemy.migrations import upgrade_head
from jobsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCallStore,
    SqlAlchemyEstimateStore,
    SqlAlchemyHistoricalAverageStore,
    SqlAlchemyJobStore,
)
from jobsync.config import get_database_config
from jobsync.domain.ports.unit_of_work import ReconciliationRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.ext.asyncio import AsyncEngine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: AsyncEngine | None = None
    _session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine | None:
        return self._engine

    @engine.setter
    def engine(self, value: AsyncEngine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Await jobsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the async engine, bring the schema to head and reset the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        engine = create_async_engine(database_uri or database.uri, echo=database.echo)
    await upgrade_head(engine)
    _STATE.engine = engine


def configured_engine() -> AsyncEngine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork:
    """One session and transaction per reconciled job event."""

    def __init__(self) -> None:
        self.session_factory: async_sessionmaker[AsyncSession] = _STATE.session_factory
        self._session: AsyncSession | None = None
        self._repositories: ReconciliationRepositories | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = self.session_factory()
        self._repositories = ReconciliationRepositories(
            calls=SqlAlchemyCallStore(self._session),
            jobs=SqlAlchemyJobStore(self._session),
            estimates=SqlAlchemyEstimateStore(self._session),
            historical_averages=SqlAlchemyHistoricalAverageStore(self._session),
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            await self.rollback()
        await self.session.close()
        self._session = None
        self._repositories = None
        return False

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    @property
    def repositories(self) -> ReconciliationRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from jobsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

from tests.helpers.stores import FakeMatcher, FakeRepositories, RevenueLossSpy

os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    type UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]
    type DatabaseScenario = Callable[[UnitOfWorkFactory], Awaitable[Any]]


@pytest.fixture
def repositories() -> FakeRepositories:
    return FakeRepositories()


@pytest.fixture
def revenue_loss() -> RevenueLossSpy:
    return RevenueLossSpy()


@pytest.fixture
def no_match() -> FakeMatcher:
    return FakeMatcher()


@pytest.fixture
def run_with_database() -> Callable[[DatabaseScenario], Any]:
    """Run a scenario against a migrated in-memory database on a single event loop."""

    def runner(scenario: DatabaseScenario) -> Any:
        async def run() -> Any:
            engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
            await startup(engine=engine, force=True)
            try:
                return await scenario(SqlAlchemyUnitOfWork)
            finally:
                await shutdown()

        return asyncio.run(run())

    return runner

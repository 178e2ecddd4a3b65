from __future__ import annotations

import asyncio

import pytest

from jobsync.domain.reconciliation.locks import KeyedLock


def test_same_key_runs_one_at_a_time() -> None:
    locks = KeyedLock()
    events: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold(("company-1", "job_1")):
            events.append(f"{name}:start")
            await asyncio.sleep(0)
            events.append(f"{name}:end")

    async def scenario() -> None:
        await asyncio.gather(worker("a"), worker("b"))

    asyncio.run(scenario())

    assert events == ["a:start", "a:end", "b:start", "b:end"]
    assert len(locks) == 0


def test_different_keys_do_not_block_each_other() -> None:
    locks = KeyedLock()

    async def scenario() -> bool:
        async with locks.hold("job_1"):
            async with locks.hold("job_2"):
                return locks.is_held("job_1") and locks.is_held("job_2")

    assert asyncio.run(scenario()) is True
    assert len(locks) == 0


def test_entry_is_released_after_errors() -> None:
    locks = KeyedLock()

    async def scenario() -> None:
        async with locks.hold("job_1"):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(scenario())

    assert len(locks) == 0
    assert not locks.is_held("job_1")

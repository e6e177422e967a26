"""Tests for the best-effort concurrent fan-out helper."""

import asyncio

import pytest

from spec_factory.ai_pipeline.fanout import gather_successes


@pytest.mark.asyncio
async def test_keeps_successes_and_drops_failures():
    async def op(n: int):
        if n % 2:
            raise RuntimeError(f"boom {n}")
        return n * 10

    results = await gather_successes([0, 1, 2, 3, 4], op, label="test")
    assert sorted(results) == [0, 20, 40]


@pytest.mark.asyncio
async def test_none_results_are_filtered():
    async def op(n: int):
        return None if n == 2 else n

    assert sorted(await gather_successes([1, 2, 3], op)) == [1, 3]


@pytest.mark.asyncio
async def test_runs_items_concurrently():
    started: list[int] = []
    release = asyncio.Event()

    async def op(n: int):
        started.append(n)
        if len(started) == 3:
            release.set()
        # Deadlocks unless all three are in flight together
        await asyncio.wait_for(release.wait(), timeout=1.0)
        return n

    results = await gather_successes([1, 2, 3], op)
    assert sorted(results) == [1, 2, 3]


@pytest.mark.asyncio
async def test_failure_does_not_cancel_siblings():
    finished: list[int] = []

    async def op(n: int):
        if n == 1:
            raise ValueError("fast failure")
        await asyncio.sleep(0.01)
        finished.append(n)
        return n

    results = await gather_successes([1, 2, 3], op)
    assert sorted(results) == [2, 3]
    assert sorted(finished) == [2, 3]


@pytest.mark.asyncio
async def test_empty_input():
    async def op(n):
        return n

    assert await gather_successes([], op) == []

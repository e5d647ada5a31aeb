from __future__ import annotations

import asyncio

import pytest

from research_swarm.errors import PlanningParseError, UpstreamServiceError
from research_swarm.services.fanout import join_all


@pytest.mark.asyncio
async def test_results_align_with_input_not_completion_order():
    delays = [0.03, 0.0, 0.01]
    finished: list[int] = []

    async def worker(index: int, delay: float) -> str:
        await asyncio.sleep(delay)
        finished.append(index)
        return f"result-{index}"

    results = await join_all("search", delays, worker, max_parallel=8)

    assert finished == [1, 2, 0]
    assert results == ["result-0", "result-1", "result-2"]


@pytest.mark.asyncio
async def test_first_failure_aborts_and_cancels_siblings():
    cancelled: list[int] = []

    async def worker(index: int, item: str) -> str:
        if item == "boom":
            raise ConnectionError("upstream reset")
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(index)
            raise
        return item

    with pytest.raises(UpstreamServiceError) as exc_info:
        await join_all("search", ["slow", "boom", "slow"], worker, max_parallel=8)

    assert exc_info.value.stage == "search"
    assert exc_info.value.dimension_index == 1
    assert isinstance(exc_info.value.__cause__, ConnectionError)
    assert sorted(cancelled) == [0, 2]


@pytest.mark.asyncio
async def test_research_errors_are_not_rewrapped():
    original = UpstreamServiceError("extraction", "model refused", 0)

    async def worker(index: int, item: int) -> int:
        raise original

    with pytest.raises(UpstreamServiceError) as exc_info:
        await join_all("extraction", [1], worker, max_parallel=1)

    assert exc_info.value is original


@pytest.mark.asyncio
async def test_other_research_errors_pass_through():
    async def worker(index: int, item: int) -> int:
        raise PlanningParseError("odd")

    with pytest.raises(PlanningParseError):
        await join_all("search", [1, 2], worker, max_parallel=2)


@pytest.mark.asyncio
async def test_max_parallel_bounds_concurrency():
    active = 0
    peak = 0

    async def worker(index: int, item: int) -> int:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return item

    results = await join_all("search", list(range(6)), worker, max_parallel=2)

    assert results == list(range(6))
    assert peak == 2


@pytest.mark.asyncio
async def test_empty_input_returns_empty_list():
    async def worker(index: int, item: int) -> int:
        raise AssertionError("never called")

    assert await join_all("search", [], worker, max_parallel=4) == []

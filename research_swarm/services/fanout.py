"""All-or-nothing fan-out/join used by the concurrent pipeline stages."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from research_swarm.errors import ResearchError, UpstreamServiceError
from research_swarm.services import logger as log_service

T = TypeVar("T")
ItemT = TypeVar("ItemT")


async def join_all(
    stage: str,
    items: Sequence[ItemT],
    worker: Callable[[int, ItemT], Awaitable[T]],
    *,
    max_parallel: int,
) -> list[T]:
    """Run ``worker(index, item)`` for every item concurrently and join.

    Returns results aligned index-for-index with ``items``, whatever order
    the workers finish in. The first failure aborts the stage: siblings still
    running are cancelled and awaited before the error is raised, so nothing
    launched here outlives the call. Failures that are not already
    ``ResearchError`` are wrapped in ``UpstreamServiceError``.
    """
    if not items:
        return []

    semaphore = asyncio.Semaphore(max(max_parallel, 1))

    async def run_one(index: int, item: ItemT) -> T:
        async with semaphore:
            return await worker(index, item)

    tasks = [
        asyncio.ensure_future(run_one(index, item)) for index, item in enumerate(items)
    ]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    failed_index = next(
        (
            index
            for index, task in enumerate(tasks)
            if task in done and not task.cancelled() and task.exception() is not None
        ),
        None,
    )
    if failed_index is None:
        return [task.result() for task in tasks]

    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    # Retrieve remaining exceptions so asyncio does not report them as unhandled.
    for task in done:
        if not task.cancelled():
            task.exception()

    exc = tasks[failed_index].exception()
    log_service.log_event(
        event_type="stage_failed",
        message=f"{stage} aborted after subtask failure",
        level="ERROR",
        stage=stage,
        dimension_index=failed_index,
        cancelled_siblings=len(pending),
        error=str(exc),
    )
    if isinstance(exc, ResearchError):
        raise exc
    raise UpstreamServiceError(stage, str(exc) or type(exc).__name__, failed_index) from exc

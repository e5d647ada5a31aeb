from __future__ import annotations

import asyncio
from typing import AsyncGenerator

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from research_swarm.agents.orchestrator import ResearchOrchestrator
from research_swarm.errors import ResearchError, UpstreamServiceError
from research_swarm.models.events import SSEEvent
from research_swarm.models.progress import ProgressState
from research_swarm.models.schemas import ResearchRequest
from research_swarm.services import logger as log_service
from research_swarm.services import streaming

router = APIRouter(prefix="/api/research", tags=["research"])


async def research_events(
    topic: str, model: str | None = None
) -> AsyncGenerator[SSEEvent, None]:
    """Run one research job, yielding a progress event per snapshot, then the result."""
    queue: asyncio.Queue[SSEEvent | None] = asyncio.Queue()

    def on_update(state: ProgressState) -> None:
        queue.put_nowait(streaming.progress(state))

    orchestrator = ResearchOrchestrator(model=model)
    task = asyncio.create_task(orchestrator.run(topic, on_update))
    task.add_done_callback(lambda _: queue.put_nowait(None))

    try:
        while True:
            event = await queue.get()
            if event is None:
                break
            yield event

        try:
            outcome = task.result()
        except UpstreamServiceError as e:
            log_service.log_event(
                event_type="research_failed",
                message="Research failed",
                level="ERROR",
                stage=e.stage,
                error=str(e),
            )
            yield streaming.error("Research failed.", stage=e.stage)
            return
        except ResearchError as e:
            yield streaming.error(str(e))
            return
        except Exception as e:
            log_service.log_event(
                event_type="stream_error",
                message="Unhandled error in research stream",
                level="ERROR",
                error=str(e),
            )
            yield streaming.error("Research stream failed unexpectedly.")
            return

        yield streaming.research_complete(outcome)
    finally:
        if not task.done():
            task.cancel()


@router.post("")
async def stream_research(request: ResearchRequest):
    """SSE endpoint streaming progress snapshots and the final report."""
    log_service.log_event(
        event_type="research_requested",
        message="Research requested",
        topic=request.topic[:100],
        model=request.model,
    )

    async def event_generator():
        async for event in research_events(request.topic, request.model):
            yield event.to_message()

    return EventSourceResponse(event_generator())

from __future__ import annotations

from research_swarm.models.events import EventType, SSEEvent
from research_swarm.models.progress import ProgressState
from research_swarm.models.research import ResearchOutcome


def progress(state: ProgressState) -> SSEEvent:
    return SSEEvent(event=EventType.PROGRESS, data=state.model_dump(mode="json"))


def research_complete(outcome: ResearchOutcome) -> SSEEvent:
    return SSEEvent(
        event=EventType.RESEARCH_COMPLETE,
        data={
            "summary_text": outcome.summary_text,
            "report": outcome.report_markdown,
            "state": outcome.final_state.model_dump(mode="json"),
        },
    )


def error(message: str, stage: str | None = None) -> SSEEvent:
    data: dict[str, str] = {"message": message}
    if stage:
        data["stage"] = stage
    return SSEEvent(event=EventType.ERROR, data=data)

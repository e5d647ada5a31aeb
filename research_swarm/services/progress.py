from __future__ import annotations

import time
from typing import Callable, Sequence

from research_swarm.models.progress import (
    Phase,
    ProgressState,
    RunStatus,
    SourceSummary,
    StepStatus,
)
from research_swarm.models.research import SourceRecord
from research_swarm.services import logger as log_service

ProgressSink = Callable[[ProgressState], None]


class ProgressReporter:
    """Single owner of a run's ProgressState.

    Steps complete strictly in order 1 -> 4 and never regress. Every
    transition pushes a deep copy of the full state to the sink, which the
    caller treats as a replace rather than a diff.
    """

    def __init__(self, topic: str, sink: ProgressSink, *, depth: int):
        self._state = ProgressState.initial(topic, depth)
        self._sink = sink
        self._started_at: float | None = None
        self._sources_recorded = False

    @property
    def state(self) -> ProgressState:
        return self._state

    def snapshot(self) -> ProgressState:
        return self._state.model_copy(deep=True)

    def _push(self) -> None:
        self._sink(self.snapshot())

    def start(self) -> None:
        """Start the clock and publish the all-pending state."""
        if self._started_at is not None:
            raise RuntimeError("Progress reporter already started")
        self._started_at = time.monotonic()
        self._push()

    def record_sources(self, records: Sequence[SourceRecord]) -> None:
        if self._sources_recorded:
            raise RuntimeError("Sources can only be recorded once per run")
        self._sources_recorded = True
        self._state.total_sources = len(records)
        self._state.sources = [SourceSummary(title=r.title, url=r.url) for r in records]

    def complete(
        self,
        phase: Phase,
        description: str,
        *,
        next_description: str | None = None,
    ) -> None:
        if self._state.status is not RunStatus.IN_FLIGHT:
            raise RuntimeError(f"Run is {self._state.status.value}; no further transitions")
        expected = Phase(self._state.completed_steps + 1)
        if phase is not expected:
            raise RuntimeError(f"Cannot complete {phase.name} before {expected.name}")
        if phase is Phase.SEARCH and not self._sources_recorded:
            raise RuntimeError("Sources must be recorded before the search phase completes")

        step = self._state.step(phase)
        step.status = StepStatus.COMPLETED
        step.description = description
        if phase is Phase.SYNTHESIS:
            self._state.execution_time = self._elapsed()
            self._state.status = RunStatus.DONE
        elif next_description is not None:
            self._state.step(Phase(int(phase) + 1)).description = next_description

        log_service.log_research_step(
            self._state.topic,
            phase.name.lower(),
            "completed",
            {"description": description, "total_sources": self._state.total_sources},
        )
        self._push()

    def fail(self, error: BaseException) -> None:
        """Mark the run failed and publish once; completed steps are kept."""
        if self._state.status is not RunStatus.IN_FLIGHT:
            return
        for step in self._state.steps:
            if step.status is StepStatus.PENDING:
                step.description = "Failed"
        self._state.status = RunStatus.FAILED
        log_service.log_research_step(
            self._state.topic, "run", "failed", {"error": str(error)}
        )
        self._push()

    def _elapsed(self) -> str:
        started = self._started_at if self._started_at is not None else time.monotonic()
        return f"{time.monotonic() - started:.1f}s"

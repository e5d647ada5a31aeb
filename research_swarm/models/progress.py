from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, Field, computed_field


class Phase(IntEnum):
    """The four pipeline phases; the value is the step id."""

    PLANNING = 1
    SEARCH = 2
    EXTRACTION = 3
    SYNTHESIS = 4


class StepStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class StepIcon(str, Enum):
    ANALYZE = "analyze"
    SEARCH = "search"
    READ = "read"
    WRITE = "write"


class RunStatus(str, Enum):
    IN_FLIGHT = "in_flight"
    DONE = "done"
    FAILED = "failed"


# action, initial description, icon
PHASE_DEFAULTS: dict[Phase, tuple[str, str, StepIcon]] = {
    Phase.PLANNING: ("Strategic Planning", "Analyzing topic dimensionality...", StepIcon.ANALYZE),
    Phase.SEARCH: ("Vector Search", "Pending plan...", StepIcon.SEARCH),
    Phase.EXTRACTION: ("Cognitive Extraction", "Pending raw data...", StepIcon.READ),
    Phase.SYNTHESIS: ("Synthesis", "Pending extraction...", StepIcon.WRITE),
}


class ProgressStep(BaseModel):
    id: int
    action: str
    description: str
    status: StepStatus = StepStatus.PENDING
    icon: StepIcon


class SourceSummary(BaseModel):
    title: str
    url: str
    type: str = "web"
    relevance: int = 100


class ProgressState(BaseModel):
    """Externally visible snapshot of a research run."""

    topic: str
    depth: int
    total_sources: int = 0
    execution_time: str = "0s"
    status: RunStatus = RunStatus.IN_FLIGHT
    steps: tuple[ProgressStep, ProgressStep, ProgressStep, ProgressStep]
    sources: list[SourceSummary] = Field(default_factory=list)

    @classmethod
    def initial(cls, topic: str, depth: int) -> "ProgressState":
        steps = tuple(
            ProgressStep(id=int(phase), action=action, description=description, icon=icon)
            for phase, (action, description, icon) in PHASE_DEFAULTS.items()
        )
        return cls(topic=topic, depth=depth, steps=steps)

    def step(self, phase: Phase) -> ProgressStep:
        return self.steps[int(phase) - 1]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completed_steps(self) -> int:
        return sum(1 for s in self.steps if s.status == StepStatus.COMPLETED)

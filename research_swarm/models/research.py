from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from research_swarm.models.progress import ProgressState


FALLBACK_DIMENSION_LABEL = "General Overview"
FALLBACK_DIMENSION_FOCUS = "General facts"


class ResearchDimension(BaseModel):
    """One independent research angle on the topic."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(min_length=1)
    query: str = Field(min_length=1)
    focus: str = ""

    @classmethod
    def fallback(cls, topic: str) -> "ResearchDimension":
        return cls(label=FALLBACK_DIMENSION_LABEL, query=topic, focus=FALLBACK_DIMENSION_FOCUS)


@dataclass(frozen=True, slots=True)
class EvidenceChunk:
    url: str
    title: str


@dataclass(frozen=True, slots=True)
class Retrieval:
    """Output of one retrieval-augmented generation call."""

    text: str
    chunks: tuple[EvidenceChunk, ...] = ()


@dataclass(frozen=True, slots=True)
class SearchResult:
    dimension: ResearchDimension
    raw_text: str
    chunks: tuple[EvidenceChunk, ...] = ()


@dataclass(frozen=True, slots=True)
class SourceRecord:
    id: int
    url: str
    title: str


@dataclass(frozen=True, slots=True)
class ExtractionNote:
    dimension_label: str
    body: str
    dropped_citations: tuple[int, ...] = ()

    def render(self) -> str:
        return f"### DIMENSION: {self.dimension_label}\n{self.body}"


@dataclass(slots=True)
class ResearchOutcome:
    summary_text: str
    final_state: ProgressState
    report_markdown: str
    notes: list[ExtractionNote] = field(default_factory=list)

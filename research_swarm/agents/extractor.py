from __future__ import annotations

from dataclasses import dataclass

from research_swarm.agents.base import BaseStage
from research_swarm.config import settings
from research_swarm.models.research import ExtractionNote, SearchResult
from research_swarm.research_core.citations import enforce_citations
from research_swarm.research_core.interfaces import TextGenerator
from research_swarm.research_core.registry import LocalCitationIndex, SourceRegistry
from research_swarm.services.fanout import join_all
from research_swarm.services.prompt_store import render_prompt
from research_swarm.tools.web_utils import hard_truncate


@dataclass(frozen=True, slots=True)
class ExtractionBrief:
    """Read-only input handed to one extraction worker."""

    label: str
    focus: str
    raw_text: str
    index: LocalCitationIndex
    known_ids: frozenset[int]


class ExtractionStage(BaseStage):
    """Cited-fact extraction, one concurrent worker per dimension."""

    name = "extraction"

    def __init__(
        self,
        generator: TextGenerator | None = None,
        model: str | None = None,
        *,
        char_budget: int | None = None,
        max_parallel: int | None = None,
    ):
        super().__init__(generator, model or settings.extraction_model.strip() or None)
        self.char_budget = int(char_budget if char_budget is not None else settings.extraction_char_budget)
        if self.char_budget <= 0:
            raise ValueError(f"char_budget must be positive, got {self.char_budget}")
        self.max_parallel = max(int(max_parallel or settings.extract_max_parallel), 1)

    def build_briefs(
        self, search_results: list[SearchResult], registry: SourceRegistry
    ) -> list[ExtractionBrief]:
        known = frozenset(r.id for r in registry.all_records())
        return [
            ExtractionBrief(
                label=result.dimension.label,
                focus=result.dimension.focus,
                raw_text=hard_truncate(result.raw_text, self.char_budget),
                index=registry.local_index_for(i),
                known_ids=known,
            )
            for i, result in enumerate(search_results)
        ]

    async def _extract_one(self, index: int, brief: ExtractionBrief) -> ExtractionNote:
        prompt = render_prompt(
            "extraction.prompt",
            label=brief.label,
            focus=brief.focus,
            raw_text=brief.raw_text,
            source_index=brief.index.render() or render_prompt("extraction.empty_index"),
        )
        text = await self._generate(
            prompt,
            dimension_index=index,
            system=render_prompt("extraction.system"),
            max_tokens=settings.extraction_max_tokens,
        )
        body, dropped = enforce_citations(
            text.strip(), brief.index.ids, label=brief.label, known=brief.known_ids
        )
        return ExtractionNote(dimension_label=brief.label, body=body, dropped_citations=dropped)

    async def extract(
        self, search_results: list[SearchResult], registry: SourceRegistry
    ) -> list[ExtractionNote]:
        briefs = self.build_briefs(search_results, registry)
        return await join_all(self.name, briefs, self._extract_one, max_parallel=self.max_parallel)

from __future__ import annotations

import asyncio

from research_swarm.agents.extractor import ExtractionStage
from research_swarm.agents.planner import Planner
from research_swarm.agents.swarm import SwarmDispatcher
from research_swarm.agents.synthesizer import Synthesizer
from research_swarm.config import settings
from research_swarm.errors import InvalidTopicError
from research_swarm.llm_client import OpenRouterGenerator
from research_swarm.models.progress import Phase
from research_swarm.models.research import ResearchOutcome
from research_swarm.research_core.interfaces import Retriever, TextGenerator
from research_swarm.research_core.registry import SourceRegistry
from research_swarm.services import logger as log_service
from research_swarm.services.progress import ProgressReporter, ProgressSink
from research_swarm.tools.grounded_search import GroundedSearch


def summary_text(topic: str, total_sources: int) -> str:
    return (
        f'I have completed the deep research on "**{topic}**".\n\n'
        f"A detailed report with {total_sources} cited sources has been generated."
    )


class ResearchOrchestrator:
    """Runs the research pipeline for one topic.

    Flow:
      1. Planner splits the topic into dimensions
      2. Swarm: one retrieval call per dimension, joined
      3. Source registry numbers every distinct URL in dimension order
      4. Extraction: one cited-fact worker per dimension, joined
      5. Synthesizer writes the report with the bibliography

    The registry and the progress state are only touched here, between
    joins; workers receive read-only briefs and return values.
    """

    def __init__(
        self,
        model: str | None = None,
        *,
        generator: TextGenerator | None = None,
        retriever: Retriever | None = None,
    ):
        self.generator = generator or OpenRouterGenerator(model=model)
        self.retriever = retriever or GroundedSearch(self.generator)
        self.planner = Planner(self.generator)
        self.swarm = SwarmDispatcher(self.retriever)
        self.extractor = ExtractionStage(self.generator)
        self.synthesizer = Synthesizer(self.generator)

    @staticmethod
    def _validate_topic(topic: str) -> None:
        if not isinstance(topic, str) or not topic.strip():
            raise InvalidTopicError("Research topic must be a non-empty string")

    async def run(self, topic: str, on_update: ProgressSink) -> ResearchOutcome:
        self._validate_topic(topic)
        reporter = ProgressReporter(topic, on_update, depth=settings.research_depth)
        reporter.start()
        log_service.log_event(event_type="research_started", message="Research started", topic=topic[:100])

        try:
            dimensions = await self.planner.plan(topic)
            labels = ", ".join(d.label for d in dimensions)
            reporter.complete(
                Phase.PLANNING,
                f"Identified {len(dimensions)} research vectors: {labels}.",
                next_description=f"Dispatching {len(dimensions)} parallel search agents...",
            )

            search_results = await self.swarm.search(dimensions)
            registry = SourceRegistry()
            registry.ingest(search_results)
            reporter.record_sources(registry.all_records())
            reporter.complete(
                Phase.SEARCH,
                f"Retrieved verified data from {len(registry)} sources.",
                next_description="Extracting valid citations from source material...",
            )

            notes = await self.extractor.extract(search_results, registry)
            dropped = sum(len(n.dropped_citations) for n in notes)
            reporter.complete(
                Phase.EXTRACTION,
                "Extracted verified facts with citations.",
                next_description="Synthesizing final report...",
            )
            if dropped:
                log_service.log_event(
                    event_type="citations_dropped",
                    message=f"Dropped {dropped} citation markers outside local indexes",
                    level="WARNING",
                    topic=topic[:100],
                )

            report = await self.synthesizer.synthesize(topic, notes, registry.bibliography())
            reporter.complete(Phase.SYNTHESIS, "Report generated.")
        except (Exception, asyncio.CancelledError) as e:
            reporter.fail(e)
            raise

        final_state = reporter.snapshot()
        return ResearchOutcome(
            summary_text=summary_text(topic, final_state.total_sources),
            final_state=final_state,
            report_markdown=report,
            notes=notes,
        )


async def run(
    topic: str,
    on_update: ProgressSink,
    *,
    model: str | None = None,
) -> ResearchOutcome:
    """Research ``topic`` end to end, pushing progress snapshots to ``on_update``."""
    return await ResearchOrchestrator(model=model).run(topic, on_update)

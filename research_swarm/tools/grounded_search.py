from __future__ import annotations

from datetime import date

from research_swarm.config import settings
from research_swarm.llm_client import OpenRouterGenerator
from research_swarm.models.research import EvidenceChunk, Retrieval
from research_swarm.research_core.interfaces import TextGenerator
from research_swarm.services import logger as log_service
from research_swarm.services.prompt_store import render_prompt
from research_swarm.tools import search_provider, web_utils
from research_swarm.tools.tavily_search import SearchResult


def format_results(results: list[SearchResult], *, snippet_chars: int) -> str:
    return "\n".join(
        f"- [{r.title or r.url}]({r.url}): {web_utils.clean_content(r.content, max_length=snippet_chars)}"
        for r in results
    )


class GroundedSearch:
    """Web search followed by one summarising generation call.

    Evidence chunks are the search hits that carry a usable URL, in the
    order the provider ranked them.
    """

    name = "retrieval"

    def __init__(self, generator: TextGenerator | None = None, model: str | None = None):
        self.generator = generator or OpenRouterGenerator()
        self.model = model or settings.retrieval_model.strip() or None

    async def retrieve(self, query: str) -> Retrieval:
        response = await search_provider.search(
            query,
            search_depth=settings.search_depth,
            max_results=max(int(settings.search_max_results), 1),
        )
        hits = [r for r in response.results if web_utils.is_valid_url(r.url)]
        if not hits:
            log_service.log_event(
                event_type="search_empty",
                message="Search returned no usable results",
                level="WARNING",
                query=query[:100],
                provider=response.provider,
            )
            return Retrieval(text="")

        today = date.today()
        text = await self.generator.generate(
            render_prompt(
                "retrieval.prompt",
                query=query,
                results=format_results(hits, snippet_chars=settings.retrieval_snippet_chars),
            ),
            caller=self.name,
            system=render_prompt("retrieval.system", today=today.isoformat()),
            model=self.model,
            max_tokens=settings.retrieval_max_tokens,
        )
        return Retrieval(
            text=text,
            chunks=tuple(EvidenceChunk(url=r.url, title=r.title) for r in hits),
        )

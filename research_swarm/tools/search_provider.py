from __future__ import annotations

from dataclasses import dataclass

from research_swarm.config import settings
from research_swarm.services import logger as log_service
from research_swarm.tools import brave_search, tavily_search
from research_swarm.tools.tavily_search import SearchResult


@dataclass
class SearchResponse:
    results: list[SearchResult]
    provider: str
    fallback_from: str | None = None
    fallback_reason: str | None = None


async def _tavily_fallback(query: str, *, search_depth: str, max_results: int, reason: str) -> SearchResponse:
    log_service.log_event(
        event_type="search_fallback",
        message="Falling back to Tavily",
        level="WARNING",
        query=query[:100],
        reason=reason,
    )
    results = await tavily_search.search(
        query=query,
        search_depth=search_depth,
        max_results=max_results,
    )
    return SearchResponse(
        results=results,
        provider="tavily",
        fallback_from="brave",
        fallback_reason=reason,
    )


async def search(
    query: str,
    *,
    search_depth: str = "advanced",
    max_results: int = 10,
) -> SearchResponse:
    provider = settings.search_provider.lower().strip()
    use_fallback = settings.search_fallback_to_tavily

    if provider == "tavily":
        results = await tavily_search.search(
            query=query,
            search_depth=search_depth,
            max_results=max_results,
        )
        return SearchResponse(results=results, provider="tavily")

    if provider == "brave":
        try:
            results = await brave_search.search(query=query, max_results=max_results)
        except Exception as e:
            if not use_fallback:
                raise
            return await _tavily_fallback(
                query, search_depth=search_depth, max_results=max_results, reason=str(e)
            )
        if results or not use_fallback:
            return SearchResponse(results=results, provider="brave")
        return await _tavily_fallback(
            query,
            search_depth=search_depth,
            max_results=max_results,
            reason="brave returned zero results",
        )

    raise ValueError(f"Unsupported SEARCH_PROVIDER: {settings.search_provider}")

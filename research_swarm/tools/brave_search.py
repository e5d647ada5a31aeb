from __future__ import annotations

from typing import Any

import httpx

from research_swarm.config import settings
from research_swarm.tools.tavily_search import SearchResult

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"
REQUEST_TIMEOUT = 30.0


def _to_result(rank: int, item: dict[str, Any], total: int) -> SearchResult:
    content = (item.get("description") or "").strip()
    if not content:
        content = " ".join(item.get("extra_snippets") or []).strip()
    return SearchResult(
        title=item.get("title") or "",
        url=item.get("url") or "",
        content=content,
        # Only the rank is exposed, so the score decays with position.
        score=max(0.0, 1.0 - rank / total),
    )


def parse_response(payload: dict[str, Any]) -> list[SearchResult]:
    """Map a Brave web-search payload to results, keeping Brave's ranking."""
    items = (payload.get("web") or {}).get("results") or []
    total = max(len(items), 1)
    return [_to_result(rank, item, total) for rank, item in enumerate(items)]


async def search(
    query: str,
    *,
    max_results: int = 10,
    client: httpx.AsyncClient | None = None,
) -> list[SearchResult]:
    """Execute a Brave web search and normalize results."""
    if not settings.brave_api_key:
        raise RuntimeError("BRAVE_API_KEY is not configured")

    headers = {
        "Accept": "application/json",
        "X-Subscription-Token": settings.brave_api_key,
    }
    params: dict[str, Any] = {"q": query, "count": max_results}

    if client is not None:
        response = await client.get(BRAVE_SEARCH_URL, params=params, headers=headers)
    else:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as own_client:
            response = await own_client.get(BRAVE_SEARCH_URL, params=params, headers=headers)
    response.raise_for_status()
    return parse_response(response.json())

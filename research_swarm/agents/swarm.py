from __future__ import annotations

from research_swarm.config import settings
from research_swarm.errors import UpstreamServiceError
from research_swarm.models.research import ResearchDimension, SearchResult
from research_swarm.research_core.interfaces import Retriever
from research_swarm.services import logger as log_service
from research_swarm.services.fanout import join_all
from research_swarm.tools.grounded_search import GroundedSearch


class SwarmDispatcher:
    """One retrieval call per dimension, all in flight at once, joined."""

    name = "search"

    def __init__(self, retriever: Retriever | None = None, *, max_parallel: int | None = None):
        self.retriever = retriever or GroundedSearch()
        self.max_parallel = max(int(max_parallel or settings.swarm_max_parallel), 1)

    async def _search_one(self, index: int, dimension: ResearchDimension) -> SearchResult:
        try:
            retrieval = await self.retriever.retrieve(dimension.query)
        except UpstreamServiceError:
            raise
        except Exception as e:
            raise UpstreamServiceError(self.name, str(e) or type(e).__name__, index) from e
        log_service.log_event(
            event_type="dimension_searched",
            message=f"Retrieved {len(retrieval.chunks)} sources",
            level="DEBUG",
            dimension=dimension.label,
            index=index,
        )
        return SearchResult(dimension=dimension, raw_text=retrieval.text, chunks=retrieval.chunks)

    async def search(self, dimensions: list[ResearchDimension]) -> list[SearchResult]:
        return await join_all(
            self.name, dimensions, self._search_one, max_parallel=self.max_parallel
        )

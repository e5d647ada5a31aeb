from __future__ import annotations

import pytest

from research_swarm.agents.swarm import SwarmDispatcher
from research_swarm.errors import UpstreamServiceError
from research_swarm.models.research import ResearchDimension


def _dims(*labels: str) -> list[ResearchDimension]:
    return [ResearchDimension(label=label, query=f"q-{label}", focus="f") for label in labels]


@pytest.mark.asyncio
async def test_search_results_align_with_dimensions(make_retriever, make_retrieval):
    retriever = make_retriever(
        {
            "q-A": make_retrieval("text A", ("https://a.example", "A")),
            "q-B": make_retrieval("text B", ("https://b.example", "B")),
            "q-C": make_retrieval("text C"),
        },
        delays={"q-A": 0.03, "q-B": 0.0, "q-C": 0.01},
    )
    dispatcher = SwarmDispatcher(retriever, max_parallel=8)

    results = await dispatcher.search(_dims("A", "B", "C"))

    assert retriever.completed == ["q-B", "q-C", "q-A"]
    assert [r.dimension.label for r in results] == ["A", "B", "C"]
    assert [r.raw_text for r in results] == ["text A", "text B", "text C"]
    assert results[0].chunks[0].url == "https://a.example"
    assert results[2].chunks == ()


@pytest.mark.asyncio
async def test_one_failed_search_fails_the_stage(make_retriever, make_retrieval):
    retriever = make_retriever(
        {
            "q-A": make_retrieval("text A"),
            "q-B": TimeoutError("search timed out"),
        }
    )
    dispatcher = SwarmDispatcher(retriever)

    with pytest.raises(UpstreamServiceError) as exc_info:
        await dispatcher.search(_dims("A", "B"))

    assert exc_info.value.stage == "search"
    assert exc_info.value.dimension_index == 1

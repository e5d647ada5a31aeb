"""Shared in-memory fakes for the generation and retrieval capabilities."""
from __future__ import annotations

import asyncio
from typing import Any, Callable

import pytest

from research_swarm.models.research import EvidenceChunk, Retrieval


class FakeGenerator:
    """Answers per caller: a string, a callable(prompt) -> str, or an exception."""

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        *,
        caller: str,
        system: str = "",
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int = 4096,
        json_output: bool = False,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "caller": caller,
                "system": system,
                "model": model,
                "temperature": temperature,
                "json_output": json_output,
            }
        )
        await asyncio.sleep(0)
        response = self.responses.get(caller, "")
        if isinstance(response, BaseException):
            raise response
        if callable(response):
            response = response(prompt)
        return response

    def calls_for(self, caller: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["caller"] == caller]


class FakeRetriever:
    """Retrieval keyed by query, with optional per-query delays."""

    def __init__(
        self,
        by_query: dict[str, Retrieval | BaseException],
        delays: dict[str, float] | None = None,
    ):
        self.by_query = by_query
        self.delays = delays or {}
        self.calls: list[str] = []
        self.completed: list[str] = []

    async def retrieve(self, query: str) -> Retrieval:
        self.calls.append(query)
        await asyncio.sleep(self.delays.get(query, 0))
        result = self.by_query.get(query, Retrieval(text=""))
        if isinstance(result, BaseException):
            raise result
        self.completed.append(query)
        return result


def retrieval(text: str, *pairs: tuple[str, str]) -> Retrieval:
    return Retrieval(text=text, chunks=tuple(EvidenceChunk(url=u, title=t) for u, t in pairs))


@pytest.fixture
def make_generator() -> Callable[..., FakeGenerator]:
    return FakeGenerator


@pytest.fixture
def make_retriever() -> Callable[..., FakeRetriever]:
    return FakeRetriever


@pytest.fixture
def make_retrieval() -> Callable[..., Retrieval]:
    return retrieval

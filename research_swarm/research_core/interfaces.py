from __future__ import annotations

from typing import Protocol, runtime_checkable

from research_swarm.models.research import Retrieval


@runtime_checkable
class TextGenerator(Protocol):
    """Plain and structured generation.

    ``json_output`` asks the backend for a JSON document; the caller still
    has to treat the answer as untrusted text.
    """

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
    ) -> str: ...


@runtime_checkable
class Retriever(Protocol):
    """Retrieval-augmented generation: free text plus ordered evidence."""

    async def retrieve(self, query: str) -> Retrieval: ...

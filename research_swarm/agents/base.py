from __future__ import annotations

from typing import Any

from research_swarm.errors import UpstreamServiceError
from research_swarm.llm_client import OpenRouterGenerator
from research_swarm.research_core.interfaces import TextGenerator


class BaseStage:
    """Shared plumbing for the generation-backed pipeline stages.

    Subclasses set ``name`` and call ``_generate``. Any failure of the
    underlying generator surfaces as ``UpstreamServiceError`` tagged with the
    stage name.
    """

    name: str = "base"

    def __init__(self, generator: TextGenerator | None = None, model: str | None = None):
        self.generator = generator or OpenRouterGenerator()
        self.model = model or None

    async def _generate(
        self,
        prompt: str,
        *,
        dimension_index: int | None = None,
        **kwargs: Any,
    ) -> str:
        try:
            return await self.generator.generate(
                prompt, caller=self.name, model=self.model, **kwargs
            )
        except UpstreamServiceError:
            raise
        except Exception as e:
            raise UpstreamServiceError(self.name, str(e) or type(e).__name__, dimension_index) from e

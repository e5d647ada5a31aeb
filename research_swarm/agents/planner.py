from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from research_swarm.agents.base import BaseStage
from research_swarm.config import settings
from research_swarm.errors import PlanningParseError
from research_swarm.models.research import ResearchDimension
from research_swarm.research_core.interfaces import TextGenerator
from research_swarm.services import logger as log_service
from research_swarm.services.prompt_store import render_prompt

MIN_DIMENSIONS = 3

PlanParse = list[ResearchDimension] | PlanningParseError


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
        if text.startswith("json"):
            text = text[4:]
    return text.strip()


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _candidate_items(payload: Any) -> list[Any] | None:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("dimensions", "items", "plan"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return None


def parse_plan(raw_text: str, *, max_dimensions: int) -> PlanParse:
    """Read planner output as dimensions, or describe why it cannot be.

    Accepts a bare JSON array or an object wrapping one. Items without a
    usable label or query are skipped; an empty result is a parse failure.
    """
    text = _strip_code_fence(raw_text or "")
    if not text:
        return PlanningParseError("empty planner response", raw_text)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        return PlanningParseError(f"invalid JSON: {e.msg}", raw_text)

    items = _candidate_items(payload)
    if items is None:
        return PlanningParseError("response is not a list of dimensions", raw_text)

    dimensions: list[ResearchDimension] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            dimensions.append(
                ResearchDimension(
                    label=_clean(item.get("label")),
                    query=_clean(item.get("query")),
                    focus=_clean(item.get("focus")) or "",
                )
            )
        except ValidationError:
            continue
        if len(dimensions) >= max(max_dimensions, 1):
            break

    if not dimensions:
        return PlanningParseError("no usable dimensions in response", raw_text)
    return dimensions


class Planner(BaseStage):
    """Turns a topic into an ordered list of research dimensions."""

    name = "planner"

    def __init__(self, generator: TextGenerator | None = None, model: str | None = None):
        super().__init__(generator, model or settings.planner_model.strip() or None)
        self.max_dimensions = max(int(settings.planner_max_dimensions), 1)

    async def plan(self, topic: str) -> list[ResearchDimension]:
        raw_text = await self._generate(
            render_prompt(
                "planner.prompt",
                topic=topic,
                min_dimensions=min(MIN_DIMENSIONS, self.max_dimensions),
                max_dimensions=self.max_dimensions,
            ),
            system=render_prompt("planner.system"),
            temperature=settings.planner_temperature,
            max_tokens=settings.planner_max_tokens,
            json_output=True,
        )

        parsed = parse_plan(raw_text, max_dimensions=self.max_dimensions)
        if isinstance(parsed, PlanningParseError):
            log_service.log_event(
                event_type="plan_fallback",
                message="Planner output unusable; using a single overview dimension",
                level="WARNING",
                reason=str(parsed),
                raw_preview=(parsed.raw_text or "")[:200],
            )
            return [ResearchDimension.fallback(topic)]
        return parsed

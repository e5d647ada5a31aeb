from __future__ import annotations

import re

from research_swarm.agents.base import BaseStage
from research_swarm.config import settings
from research_swarm.errors import UpstreamServiceError
from research_swarm.models.research import ExtractionNote
from research_swarm.research_core.citations import enforce_citations
from research_swarm.research_core.interfaces import TextGenerator
from research_swarm.research_core.registry import Bibliography
from research_swarm.services.prompt_store import render_prompt

REFERENCES_HEADING = "## References"
_HEADING_RE = re.compile(r"^#{1,6}[ \t]*references[ \t]*:?[ \t]*$", re.IGNORECASE | re.MULTILINE)


def _references_start(text: str, rendered: str) -> int | None:
    """Offset where the model's own reference section begins, if it wrote one.

    The section starts at the last copy of the rendered bibliography, pulled
    back to a References heading directly above it. Without a verbatim copy,
    the last References heading counts.
    """
    headings = list(_HEADING_RE.finditer(text))
    at = text.rfind(rendered) if rendered else -1
    if at == -1:
        return headings[-1].start() if headings else None
    for heading in reversed(headings):
        if heading.end() <= at and not text[heading.end():at].strip():
            return heading.start()
    return at


def close_report(report: str, bibliography: Bibliography) -> str:
    """Keep the report's citations inside the bibliography and end with it.

    Whatever reference section the model wrote, and anything after it, is
    replaced by exactly one canonical References block. Markers in the body
    that do not name a bibliography entry are stripped.
    """
    rendered = bibliography.render()
    body = report.rstrip()
    start = _references_start(body, rendered)
    if start is not None:
        body = body[:start]

    body, _ = enforce_citations(
        body, frozenset(r.id for r in bibliography.records), label="report"
    )
    body = body.rstrip()
    if not rendered:
        return body + "\n"
    return f"{body}\n\n{REFERENCES_HEADING}\n\n{rendered}\n"


class Synthesizer(BaseStage):
    """Merges extraction notes and the bibliography into one report."""

    name = "synthesis"

    def __init__(self, generator: TextGenerator | None = None, model: str | None = None):
        super().__init__(generator, model or settings.synthesis_model.strip() or None)

    async def synthesize(
        self, topic: str, notes: list[ExtractionNote], bibliography: Bibliography
    ) -> str:
        prompt = render_prompt(
            "synthesis.prompt",
            topic=topic,
            notes="\n\n".join(note.render() for note in notes),
            bibliography=bibliography.render(),
        )
        report = await self._generate(
            prompt,
            system=render_prompt("synthesis.system"),
            temperature=settings.synthesis_temperature,
            max_tokens=settings.synthesis_max_tokens,
        )
        if not report.strip():
            raise UpstreamServiceError(self.name, "empty report")
        return close_report(report, bibliography)

"""Citation marker parsing and integrity enforcement.

A marker is ``[n]``; groups such as ``[1, 4]`` and the index echo form
``[Source ID 3]`` are accepted on input and normalised to ``[n]`` markers.
Bracketed numbers used as Markdown link text (``[2024](...)``) are ignored, and
bare numbers too long to be a source id (``[2024]`` in a ten-source run) are
plain text.
"""
from __future__ import annotations

import re
from typing import AbstractSet

from research_swarm.errors import CitationIntegrityViolation
from research_swarm.services import logger as log_service

_ID = r"(?:source\s+id\s*)?\d+"
MARKER_RE = re.compile(
    rf"(?P<lead>[ \t]*)\[(?P<ids>{_ID}(?:\s*,\s*{_ID})*)\](?!\()",
    re.IGNORECASE,
)
_DIGITS_RE = re.compile(r"\d+")


def _ids_in(group: str) -> list[int]:
    return [int(raw) for raw in _DIGITS_RE.findall(group)]


def find_markers(text: str) -> list[int]:
    """All cited ids in order of appearance, duplicates included."""
    found: list[int] = []
    for match in MARKER_RE.finditer(text or ""):
        found.extend(_ids_in(match.group("ids")))
    return found


def check_marker(
    marker_id: int,
    *,
    allowed: AbstractSet[int],
    label: str,
    known: AbstractSet[int] | None = None,
) -> None:
    if marker_id in allowed:
        return
    if known is not None and marker_id in known:
        raise CitationIntegrityViolation(marker_id, label, "source belongs to another dimension")
    raise CitationIntegrityViolation(marker_id, label, "unknown source id")


def could_cite(number: int, ceiling: int) -> bool:
    """Whether a bare bracketed number is plausibly a source id.

    With ``ceiling`` sources registered, a citation has at most as many digits
    as ``ceiling``; ``[2024]`` in a ten-source run is a year, not a marker.
    """
    return number >= 1 and len(str(number)) <= len(str(max(ceiling, 1)))


def enforce_citations(
    text: str,
    allowed: AbstractSet[int],
    *,
    label: str,
    known: AbstractSet[int] | None = None,
    ceiling: int | None = None,
) -> tuple[str, tuple[int, ...]]:
    """Strip every marker id outside ``allowed``.

    Returns the cleaned text and the distinct dropped ids in order of first
    appearance. Markers that are already well formed and fully valid are
    left untouched. Bracketed numbers that cannot be source ids (see
    ``could_cite``) are kept as plain text without their brackets.
    ``ceiling`` defaults to the highest id in ``known`` or ``allowed``.
    """
    if ceiling is None:
        ceiling = max((*(known or ()), *allowed), default=0)
    dropped: dict[int, None] = {}

    def replace(match: re.Match[str]) -> str:
        group = match.group("ids")
        marker_ids = _ids_in(group)
        explicit = "source" in group.lower()
        if not explicit and not any(could_cite(i, ceiling) for i in marker_ids):
            return match.group("lead") + group

        kept: list[int] = []
        for marker_id in marker_ids:
            try:
                check_marker(marker_id, allowed=allowed, label=label, known=known)
            except CitationIntegrityViolation as violation:
                if marker_id not in dropped:
                    log_service.log_event(
                        event_type="citation_integrity_violation",
                        message=str(violation),
                        level="WARNING",
                        marker_id=marker_id,
                        dimension=label,
                        reason=violation.reason,
                    )
                dropped[marker_id] = None
                continue
            kept.append(marker_id)

        if not kept:
            return ""
        rebuilt = "".join(f"[{marker_id}]" for marker_id in kept)
        if rebuilt == match.group(0)[len(match.group("lead")):]:
            return match.group(0)
        return match.group("lead") + rebuilt

    cleaned = MARKER_RE.sub(replace, text or "")
    return cleaned, tuple(dropped)

"""Error taxonomy for the research pipeline."""
from __future__ import annotations


class ResearchError(Exception):
    """Base class for every error raised by the pipeline."""


class InvalidTopicError(ResearchError, ValueError):
    """The research topic is empty or whitespace only."""


class PlanningParseError(ResearchError):
    """The planner response could not be read as a list of dimensions.

    Never raised out of the planner: it is the failure branch of plan parsing
    and always resolves to the single fallback dimension.
    """

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class UpstreamServiceError(ResearchError):
    """A generation or retrieval call failed. Fatal to the run."""

    def __init__(self, stage: str, message: str, dimension_index: int | None = None):
        self.stage = stage
        self.dimension_index = dimension_index
        location = stage if dimension_index is None else f"{stage}[{dimension_index}]"
        super().__init__(f"{location}: {message}")


class CitationIntegrityViolation(ResearchError):
    """A citation marker points outside the sources its author was given."""

    def __init__(self, marker_id: int, dimension_label: str, reason: str):
        self.marker_id = marker_id
        self.dimension_label = dimension_label
        self.reason = reason
        super().__init__(f"[{marker_id}] in '{dimension_label}': {reason}")

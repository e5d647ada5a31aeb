from __future__ import annotations

from pydantic import BaseModel, Field


# --- Requests ---


class ResearchRequest(BaseModel):
    topic: str = Field(min_length=1, max_length=2000)
    model: str | None = None


# --- Responses ---


class HealthResponse(BaseModel):
    status: str
    service: str

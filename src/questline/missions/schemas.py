"""Mission admin request schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class MissionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    reward_points: int = Field(0, ge=0)
    category: str | None = Field(None, max_length=64)
    difficulty: str | None = Field(None, max_length=32)


class MissionUpdate(BaseModel):
    """Partial update: only fields present in the request body are written."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    reward_points: int | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=64)
    difficulty: str | None = Field(None, max_length=32)

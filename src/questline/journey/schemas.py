"""Journey (starting / ending) request schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

StartingStatus = Literal["active", "paused", "completed"]


class StartingCreate(BaseModel):
    title: str | None = Field(None, max_length=200)
    description: str | None = None


class StartingUpdate(BaseModel):
    """Partial update: only fields present in the request body are written."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1)
    status: StartingStatus | None = None


class EndingCreate(BaseModel):
    title: str = Field("Journey Complete", min_length=1, max_length=200)
    description: str | None = None

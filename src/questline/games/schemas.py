"""Game catalog request schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

GameStatus = Literal["active", "inactive", "archived"]


class GameCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    genre: str | None = Field(None, max_length=64)
    difficulty_level: str | None = Field(None, max_length=32)
    reward_points: int = Field(0, ge=0)
    image_url: str | None = Field(None, max_length=2048)
    status: GameStatus = "active"


class GameUpdate(BaseModel):
    """Partial update: only fields present in the request body are written."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    genre: str | None = Field(None, max_length=64)
    difficulty_level: str | None = Field(None, max_length=32)
    reward_points: int | None = Field(None, ge=0)
    image_url: str | None = Field(None, max_length=2048)
    status: GameStatus | None = None


class GameRatingRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5)

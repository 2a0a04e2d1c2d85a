"""User profile schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProfileUpdateRequest(BaseModel):
    """Partial profile update: omitted fields are left untouched."""

    name: str | None = Field(None, min_length=1, max_length=100)
    age: int | None = None
    avatar_url: str | None = Field(None, max_length=2048)

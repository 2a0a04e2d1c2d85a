"""Auth request and response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegisterRequest(BaseModel):
    """Registration form.

    Fields are optional at the schema level so the service can report missing
    input with a single combined message.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(None, max_length=100)
    email: str | None = Field(None, max_length=320)
    password: str | None = None
    confirm_password: str | None = Field(None, alias="confirmPassword")
    age: int | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return v.strip() if v else v


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    """Public projection of a user; never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    age: int
    total_points: int
    role: str
    avatar_url: str | None = None
    created_at: datetime | None = None
    last_login: datetime | None = None

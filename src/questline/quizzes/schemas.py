"""Quiz request schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

QuizStatus = Literal["active", "inactive", "archived"]


class QuizSubmission(BaseModel):
    """``answers`` maps question id (as a string key) to the chosen option letter."""

    answers: dict[str, str] = Field(default_factory=dict)


class QuizCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(None, max_length=64)
    difficulty_level: str | None = Field(None, max_length=32)
    reward_points: int = Field(0, ge=0)
    time_limit: int | None = Field(None, gt=0)
    passing_score: int = Field(70, ge=0, le=100)
    status: QuizStatus = "active"


class QuizUpdate(BaseModel):
    """Partial update: only fields present in the request body are written."""

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = Field(None, max_length=64)
    difficulty_level: str | None = Field(None, max_length=32)
    reward_points: int | None = Field(None, ge=0)
    time_limit: int | None = Field(None, gt=0)
    passing_score: int | None = Field(None, ge=0, le=100)
    status: QuizStatus | None = None


class QuestionCreate(BaseModel):
    question_text: str = Field(..., min_length=1)
    question_type: str = "multiple_choice"
    option_a: str | None = None
    option_b: str | None = None
    option_c: str | None = None
    option_d: str | None = None
    correct_answer: str

    @field_validator("correct_answer")
    @classmethod
    def check_option_letter(cls, v: str) -> str:
        letter = v.strip().upper()
        if letter not in {"A", "B", "C", "D"}:
            msg = "correct_answer must be one of A, B, C, D"
            raise ValueError(msg)
        return letter

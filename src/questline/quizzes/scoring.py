"""Pure quiz scoring helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class QuizScore:
    correct_answers: int
    total_questions: int
    score: float
    passed: bool


def score_answers(
    answer_key: Iterable[tuple[int, str]],
    answers: Mapping[str, str],
    passing_score: int,
) -> QuizScore:
    """
    Score a submission.

    ``answer_key`` yields ``(question_id, correct_answer)`` pairs; ``answers``
    maps question ids as strings to chosen options. A chosen option counts only
    when it equals the stored letter exactly. Unanswered questions count as
    wrong. A quiz without questions scores 0.

    ``passed`` is decided on the unrounded percentage; only the reported
    ``score`` is rounded to 2 decimals.
    """
    total = 0
    correct = 0
    for question_id, expected in answer_key:
        total += 1
        if answers.get(str(question_id)) == expected:
            correct += 1

    raw = correct / total * 100 if total else 0.0
    return QuizScore(
        correct_answers=correct,
        total_questions=total,
        score=round(raw, 2),
        passed=raw >= passing_score,
    )

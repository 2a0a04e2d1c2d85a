"""Quiz service: catalog, submission scoring, results and admin statistics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import case, distinct, func, select

from questline.db.models import Quiz, QuizQuestion, QuizResult, User
from questline.errors import NotFoundError, ServiceError
from questline.quizzes.scoring import score_answers
from questline.social.activity_service import record_activity
from questline.users.points import award_points

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from questline.quizzes.schemas import QuestionCreate, QuizCreate, QuizUpdate

logger = structlog.get_logger()

QUIZ_NOT_FOUND = "Quiz not found"


def quiz_to_dict(quiz: Quiz) -> dict[str, Any]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "difficulty_level": quiz.difficulty_level,
        "reward_points": quiz.reward_points,
        "time_limit": quiz.time_limit,
        "passing_score": quiz.passing_score,
        "status": quiz.status,
        "created_at": quiz.created_at,
    }


def question_to_dict(question: QuizQuestion, *, include_answer: bool = False) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": question.id,
        "quiz_id": question.quiz_id,
        "question_text": question.question_text,
        "question_type": question.question_type,
        "option_a": question.option_a,
        "option_b": question.option_b,
        "option_c": question.option_c,
        "option_d": question.option_d,
    }
    if include_answer:
        data["correct_answer"] = question.correct_answer
    return data


def result_to_dict(result: QuizResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "quiz_id": result.quiz_id,
        "user_id": result.user_id,
        "score": result.score,
        "passed": result.passed,
        "reward_earned": result.reward_earned,
        "correct_answers": result.correct_answers,
        "total_questions": result.total_questions,
        "submitted_at": result.submitted_at,
    }


class QuizService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _question_count(self) -> Any:  # noqa: ANN401
        return (
            select(func.count(QuizQuestion.id))
            .where(QuizQuestion.quiz_id == Quiz.id)
            .correlate(Quiz)
            .scalar_subquery()
            .label("question_count")
        )

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    async def list_quizzes(self) -> list[dict[str, Any]]:
        """Active quizzes with their question counts, newest first."""
        result = await self.db.execute(
            select(Quiz, self._question_count())
            .where(Quiz.status == "active")
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
        )
        quizzes = []
        for quiz, question_count in result.all():
            data = quiz_to_dict(quiz)
            data["question_count"] = int(question_count or 0)
            quizzes.append(data)
        return quizzes

    async def get_quiz_row(self, quiz_id: int) -> Quiz:
        result = await self.db.execute(select(Quiz).where(Quiz.id == quiz_id))
        quiz = result.scalar_one_or_none()
        if quiz is None:
            raise NotFoundError(QUIZ_NOT_FOUND)
        return quiz

    async def get_quiz(self, quiz_id: int) -> dict[str, Any]:
        row = (await self.db.execute(select(Quiz, self._question_count()).where(Quiz.id == quiz_id))).first()
        if row is None:
            raise NotFoundError(QUIZ_NOT_FOUND)
        data = quiz_to_dict(row[0])
        data["question_count"] = int(row[1] or 0)
        return data

    async def _questions(self, quiz_id: int) -> list[QuizQuestion]:
        result = await self.db.execute(
            select(QuizQuestion).where(QuizQuestion.quiz_id == quiz_id).order_by(QuizQuestion.id)
        )
        return list(result.scalars().all())

    async def get_questions(self, quiz_id: int, *, include_answers: bool = False) -> list[dict[str, Any]]:
        """Questions in display order. Answers are only included for admins."""
        await self.get_quiz_row(quiz_id)
        return [question_to_dict(q, include_answer=include_answers) for q in await self._questions(quiz_id)]

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, user_id: int, quiz_id: int, answers: dict[str, str]) -> dict[str, Any]:
        """
        Score a submission, store the result and award points when passed.

        Every call stores a new result row; every passing attempt earns the reward.

        Raises:
            NotFoundError: Unknown quiz.
            ServiceError: No answers, or the quiz is not active.
        """
        quiz = await self.get_quiz_row(quiz_id)
        if quiz.status != "active":
            msg = "Quiz is not available"
            raise ServiceError(msg)
        if not answers:
            msg = "Quiz answers are required"
            raise ServiceError(msg)

        questions = await self._questions(quiz_id)
        outcome = score_answers(((q.id, q.correct_answer) for q in questions), answers, quiz.passing_score)
        reward = quiz.reward_points if outcome.passed else 0

        result = QuizResult(
            user_id=user_id,
            quiz_id=quiz.id,
            score=outcome.score,
            passed=outcome.passed,
            reward_earned=reward,
            correct_answers=outcome.correct_answers,
            total_questions=outcome.total_questions,
            submitted_at=datetime.now(timezone.utc),
        )
        self.db.add(result)
        await self.db.flush()

        total = await award_points(self.db, user_id, reward, source=f"quiz:{quiz.id}")
        await record_activity(
            self.db,
            user_id,
            "quiz_passed" if outcome.passed else "quiz_attempted",
            f"{'Passed' if outcome.passed else 'Attempted'} quiz: {quiz.title}",
            metadata={"quiz_id": quiz.id, "score": outcome.score, "reward_points": reward},
        )
        logger.info(
            "quiz_submitted",
            user_id=user_id,
            quiz_id=quiz.id,
            score=outcome.score,
            passed=outcome.passed,
            reward_earned=reward,
        )
        return {
            "result_id": result.id,
            "quiz_id": quiz.id,
            "score": outcome.score,
            "passed": outcome.passed,
            "passing_score": quiz.passing_score,
            "reward_earned": reward,
            "total_questions": outcome.total_questions,
            "correct_answers": outcome.correct_answers,
            "user_total_points": total,
        }

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------

    async def get_latest_result(self, user_id: int, quiz_id: int) -> dict[str, Any]:
        """Most recent attempt by submission time (404 if the user never submitted)."""
        result = await self.db.execute(
            select(QuizResult, Quiz.title, Quiz.passing_score)
            .join(Quiz, Quiz.id == QuizResult.quiz_id)
            .where(QuizResult.user_id == user_id, QuizResult.quiz_id == quiz_id)
            .order_by(QuizResult.submitted_at.desc(), QuizResult.id.desc())
            .limit(1)
        )
        row = result.first()
        if row is None:
            msg = "Quiz result not found"
            raise NotFoundError(msg)
        data = result_to_dict(row[0])
        data["quiz_title"] = row[1]
        data["passing_score"] = row[2]
        return data

    async def get_history(self, user_id: int) -> dict[str, Any]:
        result = await self.db.execute(
            select(QuizResult, Quiz.title)
            .join(Quiz, Quiz.id == QuizResult.quiz_id)
            .where(QuizResult.user_id == user_id)
            .order_by(QuizResult.submitted_at.desc(), QuizResult.id.desc())
        )
        history = []
        for quiz_result, title in result.all():
            data = result_to_dict(quiz_result)
            data["quiz_title"] = title
            history.append(data)
        return {"total_quizzes_attempted": len(history), "history": history}

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def get_results_for_quiz(self, quiz_id: int) -> dict[str, Any]:
        await self.get_quiz_row(quiz_id)
        result = await self.db.execute(
            select(QuizResult, User.name, User.email)
            .join(User, User.id == QuizResult.user_id)
            .where(QuizResult.quiz_id == quiz_id)
            .order_by(QuizResult.submitted_at.desc(), QuizResult.id.desc())
        )
        results = []
        for quiz_result, name, email in result.all():
            data = result_to_dict(quiz_result)
            data["user_name"] = name
            data["user_email"] = email
            results.append(data)
        return {"total_results": len(results), "results": results}

    async def get_stats(self, quiz_id: int) -> dict[str, Any]:
        """Attempt statistics, recomputed on every call."""
        quiz = await self.get_quiz_row(quiz_id)
        result = await self.db.execute(
            select(
                func.count(QuizResult.id),
                func.count(distinct(QuizResult.user_id)),
                func.coalesce(func.sum(case((QuizResult.passed.is_(True), 1), else_=0)), 0),
                func.avg(QuizResult.score),
            ).where(QuizResult.quiz_id == quiz_id)
        )
        attempts, unique_users, passed_count, average = result.one()
        question_count = (
            await self.db.execute(select(func.count(QuizQuestion.id)).where(QuizQuestion.quiz_id == quiz_id))
        ).scalar_one()
        return {
            "quiz_id": quiz.id,
            "title": quiz.title,
            "total_attempts": int(attempts or 0),
            "unique_users": int(unique_users or 0),
            "passed_count": int(passed_count or 0),
            "average_score": round(float(average), 2) if average is not None else 0.0,
            "question_count": int(question_count or 0),
        }

    async def create_quiz(self, data: QuizCreate) -> Quiz:
        quiz = Quiz(**data.model_dump(), created_at=datetime.now(timezone.utc))
        self.db.add(quiz)
        await self.db.flush()
        logger.info("quiz_created", quiz_id=quiz.id, title=quiz.title)
        return quiz

    async def update_quiz(self, quiz_id: int, changes: QuizUpdate) -> Quiz:
        """
        Apply a partial update.

        Raises:
            ServiceError: If the body carries no fields or nulls a required one.
            NotFoundError: Unknown quiz.
        """
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            msg = "At least one field is required to update"
            raise ServiceError(msg)
        for required in ("title", "reward_points", "passing_score", "status"):
            if required in fields and fields[required] is None:
                msg = f"{required} cannot be null"
                raise ServiceError(msg)

        quiz = await self.get_quiz_row(quiz_id)
        for key, value in fields.items():
            setattr(quiz, key, value)
        await self.db.flush()
        logger.info("quiz_updated", quiz_id=quiz.id, fields=sorted(fields))
        return quiz

    async def add_question(self, quiz_id: int, data: QuestionCreate) -> QuizQuestion:
        await self.get_quiz_row(quiz_id)
        question = QuizQuestion(quiz_id=quiz_id, **data.model_dump())
        self.db.add(question)
        await self.db.flush()
        logger.info("quiz_question_added", quiz_id=quiz_id, question_id=question.id)
        return question

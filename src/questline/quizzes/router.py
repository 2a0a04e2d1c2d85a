"""Quiz endpoints: public catalog, authenticated submission, admin management."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import get_current_admin, get_current_user
from questline.database import get_session
from questline.db.models import User
from questline.quizzes.quiz_service import QuizService, question_to_dict, quiz_to_dict
from questline.quizzes.schemas import QuestionCreate, QuizCreate, QuizSubmission, QuizUpdate
from questline.schemas import envelope

router = APIRouter(tags=["Quizzes"])
admin_router = APIRouter(prefix="/admin/quizzes", tags=["Admin"])

QuizId = Annotated[int, Path(ge=1, description="Quiz ID")]


@router.get("/quizzes")
async def list_quizzes(db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    quizzes = await QuizService(db).list_quizzes()
    return envelope(quizzes, "Quizzes retrieved successfully", count=len(quizzes))


@router.get("/quizzes/{quiz_id}")
async def get_quiz(quiz_id: QuizId, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    """Quiz details with its questions; correct answers are withheld."""
    svc = QuizService(db)
    quiz = await svc.get_quiz(quiz_id)
    quiz["questions"] = await svc.get_questions(quiz_id)
    return envelope(quiz, "Quiz retrieved successfully")


@router.post("/quizzes/{quiz_id}/submit")
async def submit_quiz(
    quiz_id: QuizId,
    body: QuizSubmission,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Score answers; the result row and any reward commit together."""
    user_id = user.id
    result = await QuizService(db).submit(user_id, quiz_id, body.answers)
    await db.commit()
    message = "Quiz passed! You earned points." if result["passed"] else "Quiz completed. Better luck next time!"
    return envelope(result, message)


@router.get("/quizzes/{quiz_id}/result")
async def get_quiz_result(
    quiz_id: QuizId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    result = await QuizService(db).get_latest_result(user.id, quiz_id)
    return envelope(result, "Quiz result retrieved successfully")


@router.get("/quiz-history")
async def quiz_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    history = await QuizService(db).get_history(user.id)
    return envelope(history, "Quiz history retrieved successfully", count=history["total_quizzes_attempted"])


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.post("/create", status_code=201)
async def admin_create_quiz(
    body: QuizCreate,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    quiz = await QuizService(db).create_quiz(body)
    await db.commit()
    return envelope(quiz_to_dict(quiz), "Quiz created successfully")


@admin_router.put("/{quiz_id}")
async def admin_update_quiz(
    quiz_id: QuizId,
    body: QuizUpdate,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    quiz = await QuizService(db).update_quiz(quiz_id, body)
    await db.commit()
    return envelope(quiz_to_dict(quiz), "Quiz updated successfully")


@admin_router.get("/{quiz_id}/questions")
async def admin_quiz_questions(
    quiz_id: QuizId,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    questions = await QuizService(db).get_questions(quiz_id, include_answers=True)
    return envelope(questions, "Quiz questions retrieved successfully", count=len(questions))


@admin_router.post("/{quiz_id}/questions", status_code=201)
async def admin_add_question(
    quiz_id: QuizId,
    body: QuestionCreate,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    question = await QuizService(db).add_question(quiz_id, body)
    await db.commit()
    return envelope(question_to_dict(question, include_answer=True), "Question added successfully")


@admin_router.get("/{quiz_id}/results")
async def admin_quiz_results(
    quiz_id: QuizId,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    results = await QuizService(db).get_results_for_quiz(quiz_id)
    return envelope(results, "Quiz results retrieved successfully", count=results["total_results"])


@admin_router.get("/{quiz_id}/stats")
async def admin_quiz_stats(
    quiz_id: QuizId,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    stats = await QuizService(db).get_stats(quiz_id)
    return envelope(stats, "Quiz statistics retrieved successfully")

"""Server-rendered HTML pages. Pages that need a user redirect to /login."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import get_current_user_optional
from questline.auth.router import user_payload
from questline.database import get_session
from questline.db.models import User
from questline.games import game_service
from questline.journey import ending_service, starting_service
from questline.missions.mission_service import MissionService
from questline.pages import templates
from questline.quizzes.quiz_service import QuizService
from questline.social import log_service
from questline.social.activity_service import get_activity_feed

router = APIRouter(tags=["Pages"], include_in_schema=False)

RecordId = Annotated[int, Path(ge=1)]


def _login_redirect() -> RedirectResponse:
    return RedirectResponse("/login", status_code=303)


@router.get("/", response_class=HTMLResponse)
async def home(user: User | None = Depends(get_current_user_optional)) -> HTMLResponse:
    return HTMLResponse(templates.home_page(user.name if user else None))


@router.get("/register", response_class=HTMLResponse)
async def register_form() -> HTMLResponse:
    return HTMLResponse(templates.register_page())


@router.get("/login", response_class=HTMLResponse)
async def login_form(user: User | None = Depends(get_current_user_optional)) -> Response:
    """Already signed-in users go straight to the dashboard."""
    if user is not None:
        return RedirectResponse("/dashboard", status_code=303)
    return HTMLResponse(templates.login_page())


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    missions = await MissionService(db).list_missions(user.id)
    quizzes = await QuizService(db).list_quizzes()
    return HTMLResponse(templates.dashboard_page(user_payload(user), missions, quizzes))


@router.get("/profile", response_class=HTMLResponse)
async def profile(user: User | None = Depends(get_current_user_optional)) -> Response:
    if user is None:
        return _login_redirect()
    return HTMLResponse(templates.profile_page(user_payload(user)))


@router.get("/starting", response_class=HTMLResponse)
async def starting(
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    info = await starting_service.get_starting_info(db, user.id)
    progress = await starting_service.progress_counts(db, user.id)
    return HTMLResponse(templates.starting_page(user.name, info, progress))


@router.get("/ending", response_class=HTMLResponse)
async def ending(
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    info = await ending_service.get_ending_info(db, user.id)
    return HTMLResponse(templates.ending_page(user.name, info))


@router.get("/ending/summary/display", response_class=HTMLResponse)
async def ending_summary(
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    summary = await ending_service.get_ending_summary(db, user.id)
    return HTMLResponse(templates.ending_summary_page(user.name, summary))


@router.get("/ending/{ending_id}", response_class=HTMLResponse)
async def ending_detail(
    ending_id: RecordId,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    info = await ending_service.get_ending_by_id(db, user.id, ending_id)
    return HTMLResponse(templates.ending_detail_page(user.name, info))


@router.get("/quizzes/{quiz_id}/details", response_class=HTMLResponse)
async def quiz_details(
    quiz_id: RecordId,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    service = QuizService(db)
    quiz = await service.get_quiz(quiz_id)
    questions = await service.get_questions(quiz_id)
    return HTMLResponse(templates.quiz_details_page(user.name, quiz, questions))


@router.get("/quizzes/{quiz_id}/result/display", response_class=HTMLResponse)
async def quiz_result(
    quiz_id: RecordId,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    result = await QuizService(db).get_latest_result(user.id, quiz_id)
    return HTMLResponse(templates.quiz_result_page(user.name, result))


@router.get("/games/display", response_class=HTMLResponse)
async def games(
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    return HTMLResponse(templates.games_page(user.name, await game_service.list_games(db)))


@router.get("/games/{game_id}/details", response_class=HTMLResponse)
async def game_details(
    game_id: RecordId,
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    game = await game_service.get_game(db, game_id)
    return HTMLResponse(templates.game_details_page(user.name, game))


@router.get("/activity-log", response_class=HTMLResponse)
async def activity_log(
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_session),
) -> Response:
    if user is None:
        return _login_redirect()
    summary = await log_service.get_user_activity_log(db, user.id)
    summary.pop("user_id", None)
    feed, _total = await get_activity_feed(db, user.id, per_page=10)
    activities = [{"title": a.title, "created_at": a.created_at} for a in feed]
    return HTMLResponse(templates.activity_log_page(user.name, summary, activities))

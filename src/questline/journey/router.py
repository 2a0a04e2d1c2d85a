"""Journey API: starting and ending milestones under /api."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import get_current_user
from questline.database import get_session
from questline.db.models import User
from questline.journey import ending_service, starting_service
from questline.journey.schemas import EndingCreate, StartingCreate, StartingUpdate
from questline.schemas import envelope

router = APIRouter(prefix="/api", tags=["Journey"])

RecordId = Annotated[int, Path(ge=1)]


# ---- Starting ----


@router.get("/starting/status")
async def starting_status(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    starting = await starting_service.get_starting_info(db, user.id)
    message = "Journey in progress" if starting else "Journey not started yet"
    return envelope({"has_started": starting is not None, "starting": starting}, message)


@router.post("/starting/create", status_code=201)
async def create_starting(
    body: StartingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    starting = await starting_service.create_starting(db, user.id, body.title, body.description)
    await db.commit()
    return envelope(starting_service.starting_to_dict(starting), "Journey started successfully")


@router.get("/startings")
async def list_startings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    startings = await starting_service.get_user_startings(db, user.id)
    return envelope(startings, "Starting records retrieved successfully", count=len(startings))


@router.get("/starting/stats")
async def starting_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    stats = await starting_service.get_starting_stats(db, user.id)
    return envelope(stats, "Starting statistics retrieved successfully")


@router.get("/starting/progress")
async def journey_progress(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    progress = await starting_service.get_journey_progress(db, user.id)
    return envelope(progress, "Journey progress retrieved successfully")


@router.get("/starting/profile")
async def starting_with_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await starting_service.get_starting_with_user_profile(db, user.id)
    return envelope(data, "Starting profile retrieved successfully")


@router.get("/starting/{starting_id}")
async def get_starting(
    starting_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    starting = await starting_service.get_starting_by_id(db, user.id, starting_id)
    return envelope(starting_service.starting_to_dict(starting), "Starting record retrieved successfully")


@router.put("/starting/{starting_id}")
async def update_starting(
    starting_id: RecordId,
    body: StartingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    starting = await starting_service.update_starting(db, user.id, starting_id, body)
    await db.commit()
    return envelope(starting_service.starting_to_dict(starting), "Journey updated successfully")


@router.get("/journey/start-check")
async def journey_start_check(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    started = await starting_service.has_started_journey(db, user.id)
    return envelope({"journey_started": started}, "Journey start status checked")


# ---- Ending ----


@router.get("/ending")
async def get_ending(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    ending = await ending_service.get_ending_info(db, user.id)
    return envelope(ending, "Ending retrieved successfully" if ending else "No ending found")


@router.get("/endings")
async def list_endings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    endings = await ending_service.get_user_endings(db, user.id)
    return envelope(endings, "Endings retrieved successfully", count=len(endings))


@router.get("/ending/summary")
async def ending_summary(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    summary = await ending_service.get_ending_summary(db, user.id)
    return envelope(summary, "Ending summary retrieved successfully")


@router.get("/ending/stats")
async def ending_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    stats = await ending_service.get_ending_stats(db, user.id)
    return envelope(stats, "Ending statistics retrieved successfully")


@router.post("/ending/create", status_code=201)
async def create_ending(
    body: EndingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    ending = await ending_service.create_ending(db, user.id, body.title, body.description)
    await db.commit()
    return envelope(ending_service.ending_to_dict(ending), "Journey completed! Congratulations!")


@router.get("/ending/{ending_id}")
async def get_ending_by_id(
    ending_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    ending = await ending_service.get_ending_by_id(db, user.id, ending_id)
    return envelope(ending, "Ending retrieved successfully")


@router.get("/journey/completion-check")
async def journey_completion_check(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    completed = await ending_service.has_completed_journey(db, user.id)
    return envelope({"journey_completed": completed}, "Journey completion status checked")

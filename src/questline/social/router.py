"""Activity log, friends and volunteer endpoints under /api."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import get_current_user
from questline.database import get_session
from questline.db.models import User, UserActivity
from questline.schemas import envelope
from questline.social import friend_service, log_service
from questline.social.activity_service import get_activity_feed

router = APIRouter(prefix="/api", tags=["Social"])

RecordId = Annotated[int, Path(ge=1)]


def _build_activity_response(activity: UserActivity) -> dict[str, Any]:
    return {
        "id": activity.id,
        "type": activity.activity_type,
        "title": activity.title,
        "description": activity.description,
        "metadata": activity.activity_metadata,
        "created_at": activity.created_at,
    }


# ---- Activity log ----


@router.get("/activity-log")
async def activity_log(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Single summary row of the user's progress."""
    summary = await log_service.get_user_activity_log(db, user.id)
    return envelope(summary, "Activity log retrieved successfully")


@router.get("/activity-feed")
async def activity_feed(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    activity_type: str | None = Query(None, alias="type"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    activities, total = await get_activity_feed(
        db, user.id, page=page, per_page=per_page, activity_type=activity_type
    )
    data = {
        "items": [_build_activity_response(a) for a in activities],
        "page": page,
        "per_page": per_page,
        "total": total,
    }
    return envelope(data, "Activity feed retrieved successfully", count=len(activities))


@router.get("/onboarding-info")
async def onboarding_info(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    info = await log_service.get_onboarding_info(db, user.id)
    return envelope(info, "Onboarding information retrieved successfully")


@router.get("/missions-completed")
async def missions_completed(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await log_service.list_completed_missions(db, user.id)
    return envelope(data, "Completed missions retrieved successfully", count=data["total_completed"])


@router.get("/missions/{mission_id}/completion-details")
async def mission_completion_details(
    mission_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await log_service.get_mission_completion_details(db, user.id, mission_id)
    return envelope(data, "Mission completion details retrieved successfully")


# ---- Volunteer ----


@router.get("/volunteer-activities")
async def volunteer_activities(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await log_service.list_volunteer_activities(db, user.id)
    return envelope(data, "Volunteer activities retrieved successfully", count=data["total_activities"])


@router.get("/volunteer/open")
async def open_volunteer_activities(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    activities = await log_service.list_open_volunteer_activities(db)
    return envelope(activities, "Volunteer activities retrieved successfully", count=len(activities))


@router.get("/volunteer/{activity_id}/details")
async def volunteer_activity_details(
    activity_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await log_service.get_volunteer_activity_details(db, user.id, activity_id)
    return envelope(data, "Volunteer activity details retrieved successfully")


@router.post("/volunteer/{activity_id}/register", status_code=201)
async def register_volunteer(
    activity_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    user_id = user.id
    registration = await log_service.register_for_volunteer_activity(db, user_id, activity_id)
    await db.commit()
    data = {
        "registration_id": registration.id,
        "activity_id": registration.activity_id,
        "status": registration.status,
        "registration_date": registration.registration_date,
    }
    return envelope(data, "Registered for volunteer activity")


# ---- Friends ----


@router.get("/friends")
async def list_friends(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await friend_service.list_user_friends(db, user.id)
    return envelope(data, "Friends retrieved successfully", count=data["total_friends"])


@router.get("/friends/{friend_id}/details")
async def friendship_details(
    friend_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    data = await friend_service.get_friendship_details(db, user.id, friend_id)
    return envelope(data, "Friendship details retrieved successfully")


@router.post("/friends/{friend_id}/request", status_code=201)
async def send_friend_request(
    friend_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    user_id = user.id
    friendship = await friend_service.send_friend_request(db, user_id, friend_id)
    await db.commit()
    data = {"friendship_id": friendship.id, "friend_id": friend_id, "status": friendship.status}
    return envelope(data, "Friend request sent")


@router.post("/friends/{friend_id}/accept")
async def accept_friend_request(
    friend_id: RecordId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    friendship = await friend_service.accept_friend_request(db, user.id, friend_id)
    await db.commit()
    data = {"friendship_id": friendship.id, "friend_id": friend_id, "status": friendship.status}
    return envelope(data, "Friend request accepted")

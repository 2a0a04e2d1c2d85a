"""Mission endpoints: player routes plus admin CRUD under /admin/missions."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import get_current_admin, get_current_user
from questline.database import get_session
from questline.db.models import User
from questline.missions.mission_service import MissionService, mission_to_dict
from questline.missions.schemas import MissionCreate, MissionUpdate
from questline.schemas import envelope

router = APIRouter(prefix="/missions", tags=["Missions"])
admin_router = APIRouter(prefix="/admin/missions", tags=["Admin"])

MissionId = Annotated[int, Path(ge=1, description="Mission ID")]


@router.get("")
async def list_missions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """All missions with today's completion state for the caller."""
    missions = await MissionService(db).list_missions(user.id)
    return envelope(missions, "Missions retrieved successfully", count=len(missions))


@router.get("/history/all")
async def mission_history(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    history = await MissionService(db).get_history(user.id)
    return envelope(history, "Mission history retrieved successfully", count=len(history))


@router.get("/stats/totals")
async def mission_totals(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    totals = await MissionService(db).get_totals(user.id)
    return envelope(totals, "Mission totals retrieved successfully")


@router.get("/{mission_id}")
async def get_mission(
    mission_id: MissionId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    mission = await MissionService(db).get_mission(mission_id, user.id)
    return envelope(mission, "Mission retrieved successfully")


@router.get("/{mission_id}/availability")
async def mission_availability(
    mission_id: MissionId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    availability = await MissionService(db).check_availability(mission_id, user.id)
    return envelope(availability, "Mission availability checked")


@router.post("/{mission_id}/complete")
async def complete_mission(
    mission_id: MissionId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Complete a mission for today; completion and points commit together."""
    user_id = user.id
    result = await MissionService(db).complete_mission(mission_id, user_id)
    await db.commit()

    reward = result["reward_points"]
    message = f"Mission completed! You earned {reward} points." if reward > 0 else "Mission completed successfully!"
    return envelope(result, message)


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.get("")
async def admin_list_missions(
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    missions = await MissionService(db).list_missions_admin()
    return envelope(missions, "Missions retrieved successfully", count=len(missions))


@admin_router.post("/create", status_code=201)
async def admin_create_mission(
    body: MissionCreate,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    mission = await MissionService(db).create_mission(body)
    await db.commit()
    return envelope(mission_to_dict(mission), "Mission created successfully")


@admin_router.put("/{mission_id}")
async def admin_update_mission(
    body: MissionUpdate,
    mission_id: MissionId,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    mission = await MissionService(db).update_mission(mission_id, body)
    await db.commit()
    return envelope(mission_to_dict(mission), "Mission updated successfully")


@admin_router.delete("/{mission_id}")
async def admin_delete_mission(
    mission_id: MissionId,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    await MissionService(db).delete_mission(mission_id)
    await db.commit()
    return envelope({"mission_id": mission_id}, "Mission deleted successfully")

"""Mission service: daily completions, history and admin CRUD.

A mission can be completed once per user per calendar day (UTC). Completing
it inserts a ``mission_completions`` row and increments the user's points in
the same transaction; the router commits once.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, distinct, func, select
from sqlalchemy.exc import IntegrityError

from questline.db.models import Mission, MissionCompletion
from questline.errors import AlreadyCompletedError, NotFoundError, ServiceError
from questline.social.activity_service import record_activity
from questline.users.points import award_points

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from questline.missions.schemas import MissionCreate, MissionUpdate

logger = structlog.get_logger()

MISSION_NOT_FOUND = "Mission not found"


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def mission_to_dict(mission: Mission) -> dict[str, Any]:
    return {
        "id": mission.id,
        "title": mission.title,
        "description": mission.description,
        "reward_points": mission.reward_points,
        "category": mission.category,
        "difficulty": mission.difficulty,
        "created_at": mission.created_at,
    }


class MissionService:
    """Mission queries and the daily completion flow."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _annotated_select(self, user_id: int, today: date) -> Any:  # noqa: ANN401
        """SELECT missions plus per-user completion columns as correlated subqueries."""
        mc = MissionCompletion
        owned = (mc.mission_id == Mission.id, mc.user_id == user_id)
        completion_count = select(func.count(mc.id)).where(*owned).correlate(Mission).scalar_subquery()
        last_completed = select(func.max(mc.completed_at)).where(*owned).correlate(Mission).scalar_subquery()
        done_today = (
            select(func.count(mc.id))
            .where(*owned, mc.completed_date == today)
            .correlate(Mission)
            .scalar_subquery()
        )
        return select(
            Mission,
            completion_count.label("completion_count"),
            last_completed.label("last_completed_at"),
            done_today.label("done_today"),
        )

    @staticmethod
    def _annotated_dict(row: Any) -> dict[str, Any]:  # noqa: ANN401
        data = mission_to_dict(row.Mission)
        data["completed_today"] = bool(row.done_today)
        data["last_completed_at"] = row.last_completed_at
        data["completion_count"] = int(row.completion_count or 0)
        return data

    async def list_missions(self, user_id: int) -> list[dict[str, Any]]:
        """Every mission, newest first, annotated with the caller's progress."""
        stmt = self._annotated_select(user_id, today_utc()).order_by(Mission.created_at.desc(), Mission.id.desc())
        result = await self.db.execute(stmt)
        return [self._annotated_dict(row) for row in result.all()]

    async def get_mission_row(self, mission_id: int) -> Mission:
        result = await self.db.execute(select(Mission).where(Mission.id == mission_id))
        mission = result.scalar_one_or_none()
        if mission is None:
            raise NotFoundError(MISSION_NOT_FOUND)
        return mission

    async def get_mission(self, mission_id: int, user_id: int) -> dict[str, Any]:
        stmt = self._annotated_select(user_id, today_utc()).where(Mission.id == mission_id)
        row = (await self.db.execute(stmt)).first()
        if row is None:
            raise NotFoundError(MISSION_NOT_FOUND)
        return self._annotated_dict(row)

    async def is_completed_today(self, mission_id: int, user_id: int) -> bool:
        result = await self.db.execute(
            select(MissionCompletion.id).where(
                MissionCompletion.user_id == user_id,
                MissionCompletion.mission_id == mission_id,
                MissionCompletion.completed_date == today_utc(),
            )
        )
        return result.first() is not None

    async def check_availability(self, mission_id: int, user_id: int) -> dict[str, Any]:
        await self.get_mission_row(mission_id)
        return {"mission_id": mission_id, "is_available": not await self.is_completed_today(mission_id, user_id)}

    async def get_history(self, user_id: int) -> list[dict[str, Any]]:
        """All of the user's completions joined with their missions, newest first."""
        result = await self.db.execute(
            select(MissionCompletion, Mission)
            .join(Mission, Mission.id == MissionCompletion.mission_id)
            .where(MissionCompletion.user_id == user_id)
            .order_by(MissionCompletion.completed_at.desc(), MissionCompletion.id.desc())
        )
        return [
            {
                "completion_id": completion.id,
                "mission_id": mission.id,
                "title": mission.title,
                "description": mission.description,
                "reward_points": mission.reward_points,
                "category": mission.category,
                "completed_at": completion.completed_at,
                "completed_date": completion.completed_date,
            }
            for completion, mission in result.all()
        ]

    async def get_totals(self, user_id: int) -> dict[str, int]:
        """Distinct missions completed, total completions and points earned from missions."""
        result = await self.db.execute(
            select(
                func.count(distinct(MissionCompletion.mission_id)),
                func.count(MissionCompletion.id),
                func.coalesce(func.sum(Mission.reward_points), 0),
            )
            .select_from(MissionCompletion)
            .join(Mission, Mission.id == MissionCompletion.mission_id)
            .where(MissionCompletion.user_id == user_id)
        )
        distinct_missions, completions, points = result.one()
        return {
            "missions_completed": int(distinct_missions or 0),
            "total_completions": int(completions or 0),
            "total_points_earned": int(points or 0),
        }

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    async def complete_mission(self, mission_id: int, user_id: int) -> dict[str, Any]:
        """
        Record today's completion and award the mission's points.

        Raises:
            NotFoundError: Unknown mission.
            AlreadyCompletedError: The user already completed it today.
        """
        mission = await self.get_mission_row(mission_id)
        if await self.is_completed_today(mission_id, user_id):
            raise AlreadyCompletedError

        now = datetime.now(timezone.utc)
        completion = MissionCompletion(
            user_id=user_id,
            mission_id=mission.id,
            completed_at=now,
            completed_date=now.date(),
        )
        self.db.add(completion)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent completion of the same mission today
            await self.db.rollback()
            raise AlreadyCompletedError from e

        reward = mission.reward_points
        total = await award_points(self.db, user_id, reward, source=f"mission:{mission.id}")
        await record_activity(
            self.db,
            user_id,
            "mission_completed",
            f"Completed mission: {mission.title}",
            metadata={"mission_id": mission.id, "reward_points": reward},
        )
        logger.info("mission_completed", user_id=user_id, mission_id=mission.id, reward_points=reward)
        return {
            "mission_id": mission.id,
            "reward_points": reward,
            "completed_at": now,
            "user_total_points": total,
        }

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def list_missions_admin(self) -> list[dict[str, Any]]:
        completions = (
            select(func.count(MissionCompletion.id))
            .where(MissionCompletion.mission_id == Mission.id)
            .correlate(Mission)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Mission, completions.label("total_completions")).order_by(Mission.created_at.desc(), Mission.id.desc())
        )
        missions = []
        for row in result.all():
            data = mission_to_dict(row.Mission)
            data["total_completions"] = int(row.total_completions or 0)
            missions.append(data)
        return missions

    async def create_mission(self, data: MissionCreate) -> Mission:
        mission = Mission(**data.model_dump(), created_at=datetime.now(timezone.utc))
        self.db.add(mission)
        await self.db.flush()
        logger.info("mission_created", mission_id=mission.id, title=mission.title)
        return mission

    async def update_mission(self, mission_id: int, changes: MissionUpdate) -> Mission:
        """
        Apply a partial update.

        Raises:
            ServiceError: If the body carries no fields.
            NotFoundError: Unknown mission.
        """
        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            msg = "At least one field is required to update"
            raise ServiceError(msg)
        if "title" in fields and fields["title"] is None:
            msg = "Title cannot be empty"
            raise ServiceError(msg)
        if "reward_points" in fields and fields["reward_points"] is None:
            msg = "reward_points cannot be null"
            raise ServiceError(msg)

        mission = await self.get_mission_row(mission_id)
        for key, value in fields.items():
            setattr(mission, key, value)
        await self.db.flush()
        logger.info("mission_updated", mission_id=mission.id, fields=sorted(fields))
        return mission

    async def delete_mission(self, mission_id: int) -> None:
        """Delete a mission and, by cascade, its completion history."""
        await self.get_mission_row(mission_id)
        await self.db.execute(delete(Mission).where(Mission.id == mission_id))
        await self.db.flush()
        logger.info("mission_deleted", mission_id=mission_id)

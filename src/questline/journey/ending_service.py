"""Ending records: the closing milestone of a user's journey (one per user)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from questline.db.models import Ending
from questline.errors import NotFoundError, ServiceError
from questline.journey.starting_service import get_starting_for_user, progress_counts
from questline.social.activity_service import record_activity
from questline.social.friend_service import count_friends

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def ending_to_dict(ending: Ending) -> dict[str, Any]:
    return {
        "id": ending.id,
        "user_id": ending.user_id,
        "title": ending.title,
        "description": ending.description,
        "status": ending.status,
        "completion_date": ending.completion_date,
        "created_at": ending.created_at,
    }


async def _latest_ending(db: AsyncSession, user_id: int) -> Ending | None:
    result = await db.execute(
        select(Ending).where(Ending.user_id == user_id).order_by(Ending.completion_date.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def get_ending_info(db: AsyncSession, user_id: int) -> dict[str, Any] | None:
    """Latest ending, or None while the journey is still open."""
    ending = await _latest_ending(db, user_id)
    return ending_to_dict(ending) if ending else None


async def get_user_endings(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Ending).where(Ending.user_id == user_id).order_by(Ending.completion_date.desc(), Ending.id.desc())
    )
    return [ending_to_dict(e) for e in result.scalars().all()]


async def get_ending_by_id(db: AsyncSession, user_id: int, ending_id: int) -> dict[str, Any]:
    result = await db.execute(select(Ending).where(Ending.id == ending_id, Ending.user_id == user_id))
    ending = result.scalar_one_or_none()
    if ending is None:
        msg = "Ending not found"
        raise NotFoundError(msg)
    return ending_to_dict(ending)


async def create_ending(db: AsyncSession, user_id: int, title: str, description: str | None) -> Ending:
    """
    Close the user's journey and mark the starting record completed.

    Raises:
        ServiceError: No starting record yet, or the journey is already closed.
    """
    starting = await get_starting_for_user(db, user_id)
    if starting is None:
        msg = "Start your journey first"
        raise ServiceError(msg)
    if await _latest_ending(db, user_id) is not None:
        msg = "Journey already completed"
        raise ServiceError(msg)

    now = datetime.now(timezone.utc)
    ending = Ending(
        user_id=user_id,
        title=title.strip(),
        description=description.strip() if description else None,
        status="completed",
        completion_date=now,
        created_at=now,
    )
    db.add(ending)
    starting.status = "completed"
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Journey already completed"
        raise ServiceError(msg) from e
    await record_activity(db, user_id, "journey_completed", f"Completed journey: {ending.title}")
    logger.info("journey_completed", user_id=user_id, ending_id=ending.id)
    return ending


async def get_ending_summary(db: AsyncSession, user_id: int) -> dict[str, Any]:
    summary: dict[str, Any] = dict(await progress_counts(db, user_id))
    summary["total_friends"] = await count_friends(db, user_id)
    last = (await db.execute(select(func.max(Ending.completion_date)).where(Ending.user_id == user_id))).scalar()
    summary["last_ending_date"] = last
    return summary


async def get_ending_stats(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Totals; zeros and nulls when the user has no ending yet."""
    total, most_recent = (
        await db.execute(
            select(func.count(Ending.id), func.max(Ending.completion_date)).where(Ending.user_id == user_id)
        )
    ).one()
    latest = await _latest_ending(db, user_id)
    return {
        "total_endings": int(total or 0),
        "most_recent_ending": most_recent,
        "latest_status": latest.status if latest else None,
    }


async def has_completed_journey(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(
        select(Ending.id).where(Ending.user_id == user_id, Ending.status == "completed").limit(1)
    )
    return result.first() is not None

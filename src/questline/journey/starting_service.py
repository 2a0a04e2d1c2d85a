"""Starting records: the opening milestone of a user's journey (one per user)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError

from questline.db.models import MissionCompletion, QuizResult, Starting, User, VolunteerRegistration
from questline.errors import NotFoundError, ServiceError
from questline.social.activity_service import record_activity

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from questline.journey.schemas import StartingUpdate

logger = structlog.get_logger()

STARTING_NOT_FOUND = "Starting journey not found"


def starting_to_dict(starting: Starting) -> dict[str, Any]:
    return {
        "id": starting.id,
        "user_id": starting.user_id,
        "title": starting.title,
        "description": starting.description,
        "status": starting.status,
        "start_date": starting.start_date,
        "created_at": starting.created_at,
    }


async def progress_counts(db: AsyncSession, user_id: int) -> dict[str, int]:
    """Mission completions, passed quizzes (distinct) and volunteer registrations."""
    missions = (
        await db.execute(select(func.count(MissionCompletion.id)).where(MissionCompletion.user_id == user_id))
    ).scalar_one()
    quizzes = (
        await db.execute(
            select(func.count(distinct(QuizResult.quiz_id))).where(
                QuizResult.user_id == user_id, QuizResult.passed.is_(True)
            )
        )
    ).scalar_one()
    volunteer = (
        await db.execute(
            select(func.count(distinct(VolunteerRegistration.activity_id))).where(
                VolunteerRegistration.user_id == user_id
            )
        )
    ).scalar_one()
    return {
        "missions_completed": int(missions or 0),
        "quizzes_passed": int(quizzes or 0),
        "volunteer_activities": int(volunteer or 0),
    }


async def get_starting_for_user(db: AsyncSession, user_id: int) -> Starting | None:
    result = await db.execute(
        select(Starting).where(Starting.user_id == user_id).order_by(Starting.start_date.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def get_starting_info(db: AsyncSession, user_id: int) -> dict[str, Any] | None:
    starting = await get_starting_for_user(db, user_id)
    return starting_to_dict(starting) if starting else None


async def get_user_startings(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Starting).where(Starting.user_id == user_id).order_by(Starting.start_date.desc(), Starting.id.desc())
    )
    return [starting_to_dict(s) for s in result.scalars().all()]


async def get_starting_by_id(db: AsyncSession, user_id: int, starting_id: int) -> Starting:
    """Starting record owned by ``user_id``; other users' rows are reported as missing."""
    result = await db.execute(select(Starting).where(Starting.id == starting_id, Starting.user_id == user_id))
    starting = result.scalar_one_or_none()
    if starting is None:
        raise NotFoundError(STARTING_NOT_FOUND)
    return starting


async def create_starting(db: AsyncSession, user_id: int, title: str | None, description: str | None) -> Starting:
    """
    Open the user's journey.

    Raises:
        ServiceError: Missing title/description or the journey already exists.
    """
    if not title or not title.strip() or not description or not description.strip():
        msg = "Title and description are required"
        raise ServiceError(msg)
    if await get_starting_for_user(db, user_id) is not None:
        msg = "Journey already started"
        raise ServiceError(msg)

    now = datetime.now(timezone.utc)
    starting = Starting(
        user_id=user_id,
        title=title.strip(),
        description=description.strip(),
        status="active",
        start_date=now,
        created_at=now,
    )
    db.add(starting)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Journey already started"
        raise ServiceError(msg) from e
    await record_activity(db, user_id, "journey_started", f"Started journey: {starting.title}")
    logger.info("journey_started", user_id=user_id, starting_id=starting.id)
    return starting


async def update_starting(db: AsyncSession, user_id: int, starting_id: int, changes: StartingUpdate) -> Starting:
    fields = changes.model_dump(exclude_unset=True)
    if not fields:
        msg = "At least one field is required to update"
        raise ServiceError(msg)
    if any(value is None for value in fields.values()):
        msg = "Fields cannot be set to null"
        raise ServiceError(msg)

    starting = await get_starting_by_id(db, user_id, starting_id)
    for key, value in fields.items():
        setattr(starting, key, value.strip() if isinstance(value, str) else value)
    await db.flush()
    logger.info("journey_updated", user_id=user_id, starting_id=starting.id, fields=sorted(fields))
    return starting


async def get_starting_with_user_profile(db: AsyncSession, user_id: int) -> dict[str, Any]:
    row = (
        await db.execute(
            select(Starting, User.name, User.email, User.age, User.total_points)
            .join(User, User.id == Starting.user_id)
            .where(Starting.user_id == user_id)
            .order_by(Starting.start_date.desc())
            .limit(1)
        )
    ).first()
    if row is None:
        raise NotFoundError(STARTING_NOT_FOUND)
    starting, name, email, age, points = row
    data = starting_to_dict(starting)
    data.update({"name": name, "email": email, "age": age, "total_points": points})
    return data


async def get_starting_stats(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Totals and dates; zeros and nulls when the user never started."""
    total, first, latest = (
        await db.execute(
            select(func.count(Starting.id), func.min(Starting.start_date), func.max(Starting.start_date)).where(
                Starting.user_id == user_id
            )
        )
    ).one()
    current = await get_starting_for_user(db, user_id)
    return {
        "total_startings": int(total or 0),
        "first_start_date": first,
        "latest_start_date": latest,
        "current_status": current.status if current else None,
    }


async def has_started_journey(db: AsyncSession, user_id: int) -> bool:
    """True while the user has an active starting record."""
    result = await db.execute(
        select(Starting.id).where(Starting.user_id == user_id, Starting.status == "active").limit(1)
    )
    return result.first() is not None


async def get_journey_progress(db: AsyncSession, user_id: int) -> dict[str, Any]:
    row = (
        await db.execute(
            select(Starting, User.total_points)
            .join(User, User.id == Starting.user_id)
            .where(Starting.user_id == user_id)
            .order_by(Starting.start_date.desc())
            .limit(1)
        )
    ).first()
    if row is None:
        raise NotFoundError(STARTING_NOT_FOUND)
    starting, points = row
    data = starting_to_dict(starting)
    data.update(await progress_counts(db, user_id))
    data["total_points"] = points
    return data

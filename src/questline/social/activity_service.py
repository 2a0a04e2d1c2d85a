"""Personal activity feed: one row per thing a user did that earned progress."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from questline.db.models import UserActivity

ACTIVITY_TYPES = frozenset(
    {
        "mission_completed",
        "quiz_passed",
        "quiz_attempted",
        "game_completed",
        "friend_added",
        "volunteer_registered",
        "journey_started",
        "journey_completed",
    }
)


async def record_activity(
    db: AsyncSession,
    user_id: int,
    activity_type: str,
    title: str,
    description: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> UserActivity:
    """Add a feed entry inside the caller's transaction (flushed, not committed)."""
    if activity_type not in ACTIVITY_TYPES:
        msg = f"Unknown activity type: {activity_type}"
        raise ValueError(msg)
    entry = UserActivity(
        user_id=user_id,
        activity_type=activity_type,
        title=title,
        description=description,
        activity_metadata=metadata or {},
        created_at=datetime.now(timezone.utc),
    )
    db.add(entry)
    await db.flush()
    return entry


async def get_activity_feed(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    per_page: int = 20,
    activity_type: str | None = None,
) -> tuple[list[UserActivity], int]:
    """Return one page of the user's feed, newest first, and the unpaged total."""
    filters = [UserActivity.user_id == user_id]
    if activity_type is not None:
        filters.append(UserActivity.activity_type == activity_type)

    total = (await db.execute(select(func.count(UserActivity.id)).where(*filters))).scalar_one()
    rows = await db.execute(
        select(UserActivity)
        .where(*filters)
        .order_by(UserActivity.created_at.desc(), UserActivity.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
    )
    return list(rows.scalars().all()), int(total)

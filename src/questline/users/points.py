"""Reward point accounting on ``users.total_points``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update

from questline.db.models import User

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def award_points(db: AsyncSession, user_id: int, points: int, source: str) -> int:
    """
    Add ``points`` to the user's total in the current transaction.

    The increment is a single ``UPDATE ... SET total_points = total_points + n``
    so concurrent awards never overwrite each other. Returns the new total.
    """
    if points < 0:
        msg = "Points awarded must be non-negative"
        raise ValueError(msg)
    if points:
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(total_points=User.total_points + points)
            .execution_options(synchronize_session="fetch")
        )
        logger.info("points_awarded", user_id=user_id, points=points, source=source)
    return await get_total_points(db, user_id)


async def get_total_points(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(select(User.total_points).where(User.id == user_id))
    return int(result.scalar_one_or_none() or 0)

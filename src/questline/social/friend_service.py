"""Friendships: symmetric pairs where the caller may sit on either side."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.exc import IntegrityError

from questline.db.models import Friendship, User
from questline.errors import NotFoundError, ServiceError
from questline.social.activity_service import record_activity

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def counterparty(user_id: int) -> Any:  # noqa: ANN401
    """SQL expression resolving the other member of a friendship row."""
    return case((Friendship.user_id_1 == user_id, Friendship.user_id_2), else_=Friendship.user_id_1)


def involves(user_id: int) -> Any:  # noqa: ANN401
    return or_(Friendship.user_id_1 == user_id, Friendship.user_id_2 == user_id)


def _pair(a: int, b: int) -> Any:  # noqa: ANN401
    return or_(
        and_(Friendship.user_id_1 == a, Friendship.user_id_2 == b),
        and_(Friendship.user_id_1 == b, Friendship.user_id_2 == a),
    )


async def count_friends(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(Friendship.id)).where(involves(user_id), Friendship.status == "accepted")
    )
    return int(result.scalar_one() or 0)


async def list_user_friends(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Accepted friendships of ``user_id``; ``friend_id`` is always the other user."""
    friend_id = counterparty(user_id)
    result = await db.execute(
        select(
            Friendship.id,
            friend_id.label("friend_id"),
            User.name,
            User.email,
            User.total_points,
            Friendship.status,
            Friendship.created_at,
        )
        .select_from(Friendship)
        .join(User, User.id == friend_id)
        .where(involves(user_id), Friendship.status == "accepted")
        .order_by(Friendship.created_at.desc(), Friendship.id.desc())
    )
    friends = [
        {
            "friendship_id": row.id,
            "friend_id": row.friend_id,
            "friend_name": row.name,
            "friend_email": row.email,
            "friend_total_points": row.total_points,
            "status": row.status,
            "friends_since": row.created_at,
        }
        for row in result.all()
    ]
    return {"total_friends": len(friends), "friends": friends}


async def get_friendship_details(db: AsyncSession, user_id: int, friend_id: int) -> dict[str, Any]:
    """Friendship row between the caller and ``friend_id`` with the friend's profile."""
    other = counterparty(user_id)
    row = (
        await db.execute(
            select(Friendship, User.name, User.email, User.age, User.total_points)
            .select_from(Friendship)
            .join(User, User.id == other)
            .where(_pair(user_id, friend_id))
        )
    ).first()
    if row is None:
        msg = "Friendship not found"
        raise NotFoundError(msg)
    friendship, name, email, age, points = row
    return {
        "friendship_id": friendship.id,
        "friend_id": friend_id,
        "friend_name": name,
        "friend_email": email,
        "friend_age": age,
        "friend_total_points": points,
        "status": friendship.status,
        "requested_by": friendship.user_id_1,
        "created_at": friendship.created_at,
        "updated_at": friendship.updated_at,
    }


async def send_friend_request(db: AsyncSession, user_id: int, friend_id: int) -> Friendship:
    """
    Create a pending friendship from ``user_id`` to ``friend_id``.

    Raises:
        ServiceError: Self-request or an existing pair in either direction.
        NotFoundError: Unknown target user.
    """
    if user_id == friend_id:
        msg = "You cannot send a friend request to yourself"
        raise ServiceError(msg)
    target = (await db.execute(select(User.id).where(User.id == friend_id))).first()
    if target is None:
        msg = "User not found"
        raise NotFoundError(msg)
    existing = (await db.execute(select(Friendship.id).where(_pair(user_id, friend_id)))).first()
    if existing is not None:
        msg = "Friendship already exists"
        raise ServiceError(msg)

    friendship = Friendship(
        user_id_1=user_id,
        user_id_2=friend_id,
        status="pending",
        created_at=datetime.now(timezone.utc),
    )
    db.add(friendship)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Friendship already exists"
        raise ServiceError(msg) from e
    logger.info("friend_request_sent", user_id=user_id, friend_id=friend_id)
    return friendship


async def accept_friend_request(db: AsyncSession, user_id: int, requester_id: int) -> Friendship:
    """Accept a pending request that ``requester_id`` sent to ``user_id``."""
    result = await db.execute(
        select(Friendship).where(
            Friendship.user_id_1 == requester_id,
            Friendship.user_id_2 == user_id,
            Friendship.status == "pending",
        )
    )
    friendship = result.scalar_one_or_none()
    if friendship is None:
        msg = "Friend request not found"
        raise NotFoundError(msg)

    friendship.status = "accepted"
    friendship.updated_at = datetime.now(timezone.utc)
    await db.flush()
    for member, other in ((user_id, requester_id), (requester_id, user_id)):
        await record_activity(db, member, "friend_added", "New friend", metadata={"friend_id": other})
    logger.info("friend_request_accepted", user_id=user_id, requester_id=requester_id)
    return friendship

"""User profile business logic."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete

from questline.config import get_settings
from questline.db.models import User
from questline.errors import ServiceError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from questline.users.schemas import ProfileUpdateRequest

logger = structlog.get_logger()


async def update_profile(db: AsyncSession, user: User, changes: ProfileUpdateRequest) -> User:
    """
    Apply the fields present in ``changes`` to ``user``.

    Raises:
        ServiceError: If nothing was supplied, a required field is null, or
            the age is below the minimum.
    """
    fields = changes.model_dump(exclude_unset=True)
    if not fields:
        msg = "No fields to update"
        raise ServiceError(msg)
    if "name" in fields and fields["name"] is None:
        msg = "Name cannot be empty"
        raise ServiceError(msg)
    if "age" in fields and fields["age"] is None:
        msg = "age cannot be null"
        raise ServiceError(msg)

    min_age = get_settings().min_age
    if "age" in fields and fields["age"] < min_age:
        msg = f"Age must be at least {min_age} years old"
        raise ServiceError(msg)
    if "name" in fields:
        fields["name"] = fields["name"].strip()
        if not fields["name"]:
            msg = "Name cannot be empty"
            raise ServiceError(msg)

    for key, value in fields.items():
        setattr(user, key, value)
    await db.flush()
    logger.info("profile_updated", user_id=user.id, fields=sorted(fields))
    return user


async def delete_account(db: AsyncSession, user: User) -> None:
    """Delete the user row; dependent rows go with it via ON DELETE CASCADE."""
    user_id = user.id
    await db.execute(delete(User).where(User.id == user_id))
    await db.flush()
    logger.info("account_deleted", user_id=user_id)

"""User profile endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import AuthContext, get_auth_context
from questline.auth.router import user_payload
from questline.auth.service import get_active_session, revoke_session
from questline.auth.session import clear_session_cookie, create_session_token, set_session_cookie
from questline.database import get_session
from questline.schemas import envelope
from questline.users.schemas import ProfileUpdateRequest
from questline.users.service import delete_account, update_profile

router = APIRouter(tags=["Users"])


@router.get("/api/profile")
async def get_profile(ctx: AuthContext = Depends(get_auth_context)) -> dict[str, Any]:
    """Current user's profile."""
    return envelope(user_payload(ctx.user), "Profile retrieved successfully")


@router.post("/profile/update")
async def update_my_profile(
    body: ProfileUpdateRequest,
    response: Response,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Partial profile update; the session cookie is re-issued with the new values."""
    user = await update_profile(db, ctx.user, body)
    session = await get_active_session(db, ctx.session_id)
    await db.commit()

    if session is not None:
        set_session_cookie(response, create_session_token(user, session.id, session.expires_at))
    return envelope(user_payload(user), "Profile updated successfully")


@router.post("/profile/delete")
async def delete_my_profile(
    response: Response,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Delete the account and everything attached to it, then end the session."""
    await revoke_session(db, ctx.session_id)
    await delete_account(db, ctx.user)
    await db.commit()
    clear_session_cookie(response)
    return envelope(None, "Account deleted successfully")

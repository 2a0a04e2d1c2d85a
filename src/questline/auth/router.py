"""Authentication router: register, login, logout."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import AuthContext, get_auth_context_optional
from questline.auth.schemas import LoginRequest, RegisterRequest, UserResponse
from questline.auth.service import authenticate_user, create_session, register_user, revoke_session
from questline.auth.session import clear_session_cookie, create_session_token, set_session_cookie
from questline.database import get_session
from questline.db.models import User
from questline.schemas import envelope

logger = structlog.get_logger()

router = APIRouter(tags=["Authentication"])


def user_payload(user: User) -> dict[str, Any]:
    """Public projection of a user as a JSON-ready dict."""
    return UserResponse.model_validate(user).model_dump(mode="json")


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Create an account. The caller logs in separately."""
    user = await register_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        confirm_password=body.confirm_password,
        age=body.age,
    )
    await db.commit()
    return envelope(user_payload(user), "Registration successful! Please log in.")


@router.post("/login")
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Verify credentials, open a session and set the session cookie."""
    user = await authenticate_user(db, body.email, body.password)
    session = await create_session(
        db,
        user.id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    await db.commit()

    set_session_cookie(response, create_session_token(user, session.id, session.expires_at))
    logger.info("user_logged_in", user_id=user.id, session_id=session.id)
    return envelope(user_payload(user), "Login successful")


async def _end_session(db: AsyncSession, ctx: AuthContext | None) -> None:
    if ctx is None:
        return
    await revoke_session(db, ctx.session_id)
    await db.commit()
    logger.info("user_logged_out", user_id=ctx.user.id, session_id=ctx.session_id)


@router.post("/logout")
async def logout(
    response: Response,
    ctx: AuthContext | None = Depends(get_auth_context_optional),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    """Revoke the current session (if any) and clear the cookie. Always succeeds."""
    await _end_session(db, ctx)
    clear_session_cookie(response)
    return envelope(None, "Logged out successfully")


@router.get("/logout", include_in_schema=False)
async def logout_page(
    ctx: AuthContext | None = Depends(get_auth_context_optional),
    db: AsyncSession = Depends(get_session),
) -> RedirectResponse:
    """Browser variant of logout: ends the session and returns to the login page."""
    await _end_session(db, ctx)
    redirect = RedirectResponse("/login", status_code=303)
    clear_session_cookie(redirect)
    return redirect

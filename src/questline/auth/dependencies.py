"""FastAPI authentication dependencies.

Handlers receive the caller's identity explicitly through these dependencies;
nothing is read from shared mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jwt
import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.service import get_active_session, get_user_by_id
from questline.auth.session import verify_session_token
from questline.config import get_settings
from questline.database import get_session
from questline.db.models import User

_bearer = HTTPBearer(auto_error=False)

NOT_AUTHENTICATED = "User not authenticated"
ADMIN_REQUIRED = "Access denied. Admin privileges required."


@dataclass(frozen=True)
class AuthContext:
    """Request-scoped identity: the loaded user plus the session that proved it."""

    user: User
    session_id: str
    claims: dict[str, Any]


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    """Session cookie first, then an ``Authorization: Bearer`` header."""
    token = request.cookies.get(get_settings().session_cookie_name)
    if token:
        return token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_auth_context_optional(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> AuthContext | None:
    """Resolve the caller's session, or None when absent, invalid, revoked or orphaned."""
    token = _extract_token(request, credentials)
    if token is None:
        return None
    try:
        claims = verify_session_token(token)
    except jwt.InvalidTokenError as e:
        structlog.get_logger().debug("session_rejected", reason=str(e))
        return None

    session = await get_active_session(db, claims["jti"])
    if session is None:
        return None
    user = await get_user_by_id(db, int(claims["sub"]))
    if user is None:
        return None
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return AuthContext(user=user, session_id=session.id, claims=claims)


async def get_auth_context(
    ctx: AuthContext | None = Depends(get_auth_context_optional),
) -> AuthContext:
    """Require a valid session. Raises 401 otherwise."""
    if ctx is None:
        raise HTTPException(status_code=401, detail=NOT_AUTHENTICATED)
    return ctx


async def get_current_user(ctx: AuthContext = Depends(get_auth_context)) -> User:
    return ctx.user


async def get_current_user_optional(
    ctx: AuthContext | None = Depends(get_auth_context_optional),
) -> User | None:
    return ctx.user if ctx else None


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """Require an authenticated admin. Raises 401 / 403."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail=ADMIN_REQUIRED)
    return user

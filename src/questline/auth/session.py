"""
Signed session tokens.

A session token is an HS256 JWT carried in an HttpOnly cookie. Its claims hold
a non-sensitive projection of the user taken at login time; the ``jti`` points
at the ``user_sessions`` row that logout revokes.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import jwt

from questline.config import get_settings

if TYPE_CHECKING:
    from starlette.responses import Response

    from questline.db.models import User

SESSION_TOKEN_TYPE = "session"


def session_expiry(now: datetime | None = None) -> datetime:
    settings = get_settings()
    return (now or datetime.now(timezone.utc)) + timedelta(hours=settings.session_ttl_hours)


def create_session_token(user: User, session_id: str, expires_at: datetime) -> str:
    """
    Encode a session token for ``user``.

    Args:
        user: The authenticated user; its public fields become claims.
        session_id: ID of the backing ``user_sessions`` row (JWT ``jti``).
        expires_at: Absolute expiry, shared with the session row.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "jti": session_id,
        "name": user.name,
        "email": user.email,
        "age": user.age,
        "points": user.total_points,
        "role": user.role,
        "iat": datetime.now(timezone.utc),
        "exp": expires_at,
        "iss": settings.session_issuer,
        "type": SESSION_TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def verify_session_token(token: str) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired, or not a session token.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.session_algorithm],
            issuer=settings.session_issuer,
            options={"require": ["sub", "jti", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Session has expired"
        raise jwt.InvalidTokenError(msg) from None

    if payload.get("type") != SESSION_TOKEN_TYPE:
        msg = f"Expected token type '{SESSION_TOKEN_TYPE}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)
    return payload


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.environment not in ("development", "test"),
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(key=settings.session_cookie_name, path="/")

"""
Authentication business logic.

Handles user registration, credential checks and server-side session records.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from email_validator import EmailNotValidError, validate_email
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError

from questline.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from questline.auth.session import session_expiry
from questline.config import get_settings
from questline.db.models import User, UserSession
from questline.errors import AuthenticationError, ServiceError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def validate_registration(
    name: str | None,
    email: str | None,
    password: str | None,
    confirm_password: str | None,
    age: int | None,
) -> None:
    """
    Check registration input in a fixed order, raising on the first failure.

    Raises:
        ServiceError: With a message naming the rule that failed.
    """
    settings = get_settings()
    if not name or not email or not password or age is None:
        msg = "Name, email, password, and age are required"
        raise ServiceError(msg)
    if age < settings.min_age:
        msg = f"Age must be at least {settings.min_age} years old"
        raise ServiceError(msg)
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        msg = "Please provide a valid email address"
        raise ServiceError(msg) from e
    if password != confirm_password:
        msg = "Passwords do not match"
        raise ServiceError(msg)
    validate_password_strength(password)


def _initial_role(email: str) -> str:
    """Emails listed in ``admin_emails`` register as admins."""
    admins = {e.strip().lower() for e in get_settings().admin_emails}
    return "admin" if email.strip().lower() in admins else "user"


async def register_user(
    db: AsyncSession,
    name: str | None,
    email: str | None,
    password: str | None,
    confirm_password: str | None,
    age: int | None,
) -> User:
    """
    Register a new user with email + password. Points start at zero.

    Raises:
        ServiceError: If input is invalid or the email is already registered.
    """
    validate_registration(name, email, password, confirm_password, age)

    existing = await get_user_by_email(db, email)
    if existing is not None:
        msg = "User with this email already exists"
        raise ServiceError(msg)

    user = User(
        name=name,
        email=email.strip().lower(),
        password_hash=hash_password(password),
        age=age,
        total_points=0,
        role=_initial_role(email),
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "User with this email already exists"
        raise ServiceError(msg) from e
    logger.info("user_registered", user_id=user.id, email=user.email)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Unknown email and wrong password fail with the same message.

    Raises:
        AuthenticationError: If credentials are invalid.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed", email=email)
        raise AuthenticationError(INVALID_CREDENTIALS)

    user.last_login = datetime.now(timezone.utc)
    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)
    await db.flush()
    return user


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


async def create_session(
    db: AsyncSession,
    user_id: int,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> UserSession:
    """Store a new session row. Its ``id`` becomes the token's ``jti``."""
    now = datetime.now(timezone.utc)
    session = UserSession(
        id=str(uuid.uuid4()),
        user_id=user_id,
        issued_at=now,
        expires_at=session_expiry(now),
        ip_address=ip_address,
        user_agent=user_agent[:512] if user_agent else None,
    )
    db.add(session)
    await db.flush()
    return session


async def get_active_session(db: AsyncSession, session_id: str) -> UserSession | None:
    """Look up a non-revoked session row by its ID."""
    result = await db.execute(
        select(UserSession)
        .where(UserSession.id == session_id)
        .where(UserSession.is_revoked == False)  # noqa: E712
    )
    return result.scalar_one_or_none()


async def revoke_session(db: AsyncSession, session_id: str) -> bool:
    """Revoke a session. Returns True if an active row was found."""
    result = await db.execute(
        update(UserSession)
        .where(UserSession.id == session_id)
        .where(UserSession.is_revoked == False)  # noqa: E712
        .values(is_revoked=True, revoked_at=datetime.now(timezone.utc))
    )
    await db.flush()
    return bool(result.rowcount)

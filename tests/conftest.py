"""Shared test fixtures."""

from __future__ import annotations

import os

os.environ["QL_ENVIRONMENT"] = "test"
os.environ["QL_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["QL_SEED_CATALOG"] = "false"
os.environ["QL_LOG_FORMAT"] = "console"
os.environ["QL_ADMIN_EMAILS"] = '["admin@example.com"]'

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

from questline.config import get_settings  # noqa: E402
from questline.database import close_db, get_engine, get_session, init_db  # noqa: E402
from questline.db import models  # noqa: E402
from questline.db.base import Base  # noqa: E402
from questline.main import create_app  # noqa: E402

get_settings.cache_clear()

DEFAULT_PASSWORD = "Sup3rSecret!"


@pytest_asyncio.fixture
async def client(tmp_path: Path) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against a fresh SQLite database. Redis is left uninitialized."""
    await init_db(f"sqlite+aiosqlite:///{tmp_path / 'questline.db'}")
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await close_db()


async def register(
    client: AsyncClient,
    email: str = "player@example.com",
    name: str = "Player One",
    age: int = 25,
    password: str = DEFAULT_PASSWORD,
) -> dict[str, Any]:
    """Register a user through the API and return the created user payload."""
    response = await client.post(
        "/register",
        json={"name": name, "email": email, "password": password, "confirmPassword": password, "age": age},
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def login(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD) -> dict[str, str]:
    """Log in and return an Authorization header carrying the session token.

    The cookie jar is cleared so several users can share one client.
    """
    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.cookies[get_settings().session_cookie_name]
    client.cookies.clear()
    return {"Authorization": f"Bearer {token}"}


async def register_and_login(client: AsyncClient, email: str = "player@example.com", **kwargs: Any) -> tuple[dict[str, Any], dict[str, str]]:  # noqa: ANN401
    user = await register(client, email=email, **kwargs)
    return user, await login(client, email)


async def set_points(user_id: int, points: int) -> None:
    async for db in get_session():
        await db.execute(update(models.User).where(models.User.id == user_id).values(total_points=points))
        await db.commit()
        break


async def add_rows(*rows: Any) -> None:  # noqa: ANN401
    """Insert ORM rows directly and commit."""
    async for db in get_session():
        db.add_all(rows)
        await db.commit()
        break


async def fetch_scalar(statement: Any) -> Any:  # noqa: ANN401
    async for db in get_session():
        return (await db.execute(statement)).scalar()
    return None


@pytest_asyncio.fixture
async def user_headers(client: AsyncClient) -> dict[str, str]:
    """Headers for a freshly registered regular user."""
    _user, headers = await register_and_login(client)
    return headers


@pytest_asyncio.fixture
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    """Headers for an admin (``admin@example.com`` is listed in QL_ADMIN_EMAILS)."""
    _user, headers = await register_and_login(client, email="admin@example.com", name="Admin")
    return headers

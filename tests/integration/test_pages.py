"""Tests for the server-rendered HTML pages."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from questline.db.models import Game, Mission
from tests.conftest import add_rows

PROTECTED_PAGES = [
    "/dashboard",
    "/profile",
    "/starting",
    "/ending",
    "/ending/summary/display",
    "/games/display",
    "/activity-log",
]


@pytest.mark.asyncio
class TestPublicPages:
    @pytest.mark.parametrize("path", ["/", "/register", "/login"])
    async def test_renders(self, client: AsyncClient, path: str):
        response = await client.get(path)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    async def test_login_redirects_signed_in_user(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.get("/login", headers=user_headers)
        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"


@pytest.mark.asyncio
class TestProtectedPages:
    @pytest.mark.parametrize("path", PROTECTED_PAGES)
    async def test_redirects_to_login(self, client: AsyncClient, path: str):
        response = await client.get(path)
        assert response.status_code == 303
        assert response.headers["location"] == "/login"

    @pytest.mark.parametrize("path", PROTECTED_PAGES)
    async def test_renders_for_user(self, client: AsyncClient, user_headers: dict[str, str], path: str):
        response = await client.get(path, headers=user_headers)
        assert response.status_code == 200
        assert "Player One" in response.text

    async def test_dashboard_lists_missions(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="Say <hello>", reward_points=10))
        response = await client.get("/dashboard", headers=user_headers)
        assert "Say &lt;hello&gt;" in response.text
        assert "/missions/1/complete" in response.text

    async def test_games_display_is_not_a_game_id(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Game(id=1, title="Word Sprint", reward_points=15))
        response = await client.get("/games/display", headers=user_headers)
        assert response.status_code == 200
        assert "Word Sprint" in response.text

        details = await client.get("/games/1/details", headers=user_headers)
        assert details.status_code == 200
        assert "/games/1/rate" in details.text

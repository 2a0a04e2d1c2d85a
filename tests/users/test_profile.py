"""Tests for reading, updating and deleting the current user's profile."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from questline.config import get_settings
from questline.db.models import Mission, MissionCompletion, User, UserSession
from tests.conftest import add_rows, fetch_scalar, register_and_login


@pytest.mark.asyncio
class TestGetProfile:
    async def test_returns_public_fields(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.get("/api/profile", headers=user_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == "player@example.com"
        assert data["name"] == "Player One"
        assert data["total_points"] == 0
        assert data["role"] == "user"
        assert "password_hash" not in data

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/profile")
        assert response.status_code == 401


@pytest.mark.asyncio
class TestUpdateProfile:
    async def test_partial_update(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/profile/update", json={"name": "  New Name  "}, headers=user_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully"
        assert body["data"]["name"] == "New Name"
        assert body["data"]["age"] == 25

    async def test_session_cookie_is_reissued(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/profile/update", json={"age": 30}, headers=user_headers)
        assert get_settings().session_cookie_name in response.cookies
        client.cookies.clear()

    async def test_avatar_can_be_cleared(self, client: AsyncClient, user_headers: dict[str, str]):
        await client.post("/profile/update", json={"avatar_url": "https://example.com/me.png"}, headers=user_headers)
        response = await client.post("/profile/update", json={"avatar_url": None}, headers=user_headers)
        assert response.status_code == 200
        assert response.json()["data"]["avatar_url"] is None
        client.cookies.clear()

    @pytest.mark.parametrize(
        ("field", "message"), [("name", "Name cannot be empty"), ("age", "age cannot be null")]
    )
    async def test_required_fields_cannot_be_null(
        self, client: AsyncClient, user_headers: dict[str, str], field: str, message: str
    ):
        response = await client.post("/profile/update", json={field: None}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == message

    async def test_no_fields(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/profile/update", json={}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No fields to update"

    async def test_underage(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/profile/update", json={"age": 10}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Age must be at least 13 years old"

    async def test_blank_name(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/profile/update", json={"name": "   "}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Name cannot be empty"


@pytest.mark.asyncio
class TestDeleteProfile:
    async def test_delete_cascades(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        await add_rows(Mission(id=1, title="One", reward_points=5))
        await client.post("/missions/1/complete", headers=headers)

        response = await client.post("/profile/delete", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Account deleted successfully"
        client.cookies.clear()

        assert await fetch_scalar(select(User.id).where(User.id == user["id"])) is None
        assert await fetch_scalar(select(func.count(MissionCompletion.id))) == 0
        assert await fetch_scalar(select(func.count(UserSession.id))) == 0

    async def test_token_stops_working(self, client: AsyncClient, user_headers: dict[str, str]):
        await client.post("/profile/delete", headers=user_headers)
        client.cookies.clear()
        response = await client.get("/api/profile", headers=user_headers)
        assert response.status_code == 401

"""Integration tests for daily missions and the admin mission CRUD."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from questline.db.models import Mission, MissionCompletion, User, UserActivity
from questline.missions.mission_service import MissionService
from tests.conftest import add_rows, fetch_scalar, register_and_login, set_points


async def _points(user_id: int) -> int:
    return await fetch_scalar(select(User.total_points).where(User.id == user_id))


@pytest.mark.asyncio
class TestCompleteMission:
    async def test_completion_awards_points(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        await add_rows(Mission(id=7, title="Daily check-in", reward_points=50))
        await set_points(user["id"], 100)

        response = await client.post("/missions/7/complete", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Mission completed! You earned 50 points."
        assert body["data"]["mission_id"] == 7
        assert body["data"]["reward_points"] == 50
        assert body["data"]["user_total_points"] == 150
        assert await _points(user["id"]) == 150

    async def test_second_completion_same_day_rejected(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        await add_rows(Mission(id=7, title="Daily check-in", reward_points=50))
        await set_points(user["id"], 100)

        await client.post("/missions/7/complete", headers=headers)
        response = await client.post("/missions/7/complete", headers=headers)
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Mission already completed today. Come back tomorrow!",
        }
        assert await _points(user["id"]) == 150
        completions = await fetch_scalar(select(func.count(MissionCompletion.id)))
        assert completions == 1

    async def test_concurrent_duplicate_reported_as_already_completed(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        await add_rows(Mission(id=7, title="Daily check-in", reward_points=50))
        now = datetime.now(timezone.utc)
        await add_rows(MissionCompletion(user_id=user["id"], mission_id=7, completed_at=now, completed_date=now.date()))
        await set_points(user["id"], 100)

        # A request that passed the pre-check just before another one inserted today's row
        with patch.object(MissionService, "is_completed_today", AsyncMock(return_value=False)):
            response = await client.post("/missions/7/complete", headers=headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Mission already completed today. Come back tomorrow!"
        assert await _points(user["id"]) == 100
        assert await fetch_scalar(select(func.count(MissionCompletion.id))) == 1

    async def test_yesterdays_completion_does_not_block_today(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        yesterday = datetime.now(timezone.utc) - timedelta(days=1)
        await add_rows(Mission(id=3, title="Read", reward_points=10))
        await add_rows(
            MissionCompletion(user_id=user["id"], mission_id=3, completed_at=yesterday, completed_date=yesterday.date())
        )
        response = await client.post("/missions/3/complete", headers=headers)
        assert response.status_code == 200

    async def test_zero_reward_message(self, client: AsyncClient):
        _user, headers = await register_and_login(client)
        await add_rows(Mission(id=1, title="Say hi", reward_points=0))
        response = await client.post("/missions/1/complete", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Mission completed successfully!"

    async def test_unknown_mission(self, client: AsyncClient):
        _user, headers = await register_and_login(client)
        response = await client.post("/missions/999/complete", headers=headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Mission not found"

    async def test_invalid_id_rejected(self, client: AsyncClient):
        _user, headers = await register_and_login(client)
        response = await client.post("/missions/0/complete", headers=headers)
        assert response.status_code == 400

    async def test_completion_recorded_in_activity_feed(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        await add_rows(Mission(id=2, title="Stretch", reward_points=5))
        await client.post("/missions/2/complete", headers=headers)
        activity_type = await fetch_scalar(select(UserActivity.activity_type).where(UserActivity.user_id == user["id"]))
        assert activity_type == "mission_completed"

    async def test_other_users_unaffected(self, client: AsyncClient):
        alice, alice_headers = await register_and_login(client, email="alice@example.com", name="Alice")
        bob, bob_headers = await register_and_login(client, email="bob@example.com", name="Bob")
        await add_rows(Mission(id=7, title="Daily check-in", reward_points=50))

        assert (await client.post("/missions/7/complete", headers=alice_headers)).status_code == 200
        assert (await client.post("/missions/7/complete", headers=bob_headers)).status_code == 200
        assert await _points(alice["id"]) == 50
        assert await _points(bob["id"]) == 50


@pytest.mark.asyncio
class TestMissionReads:
    async def test_list_marks_completed_today(self, client: AsyncClient):
        _user, headers = await register_and_login(client)
        await add_rows(Mission(id=1, title="One", reward_points=5), Mission(id=2, title="Two", reward_points=5))
        await client.post("/missions/1/complete", headers=headers)

        response = await client.get("/missions", headers=headers)
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        by_id = {m["id"]: m for m in body["data"]}
        assert by_id[1]["completed_today"] is True
        assert by_id[1]["completion_count"] == 1
        assert by_id[2]["completed_today"] is False
        assert by_id[2]["completion_count"] == 0

    async def test_availability(self, client: AsyncClient):
        _user, headers = await register_and_login(client)
        await add_rows(Mission(id=1, title="One", reward_points=5))

        response = await client.get("/missions/1/availability", headers=headers)
        assert response.json()["data"]["is_available"] is True
        await client.post("/missions/1/complete", headers=headers)
        response = await client.get("/missions/1/availability", headers=headers)
        assert response.json()["data"]["is_available"] is False

    async def test_history_and_totals(self, client: AsyncClient):
        user, headers = await register_and_login(client)
        earlier = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        await add_rows(Mission(id=1, title="One", reward_points=5))
        await add_rows(MissionCompletion(user_id=user["id"], mission_id=1, completed_at=earlier, completed_date=date(2026, 1, 5)))
        await client.post("/missions/1/complete", headers=headers)

        history = (await client.get("/missions/history/all", headers=headers)).json()
        assert history["count"] == 2
        totals = (await client.get("/missions/stats/totals", headers=headers)).json()["data"]
        assert totals["total_completions"] == 2
        assert totals["missions_completed"] == 1


@pytest.mark.asyncio
class TestAdminMissions:
    async def test_create_update_delete(self, client: AsyncClient, admin_headers: dict[str, str]):
        response = await client.post(
            "/admin/missions/create",
            json={"title": "Hydrate", "description": "Drink water", "reward_points": 15, "category": "health"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        mission_id = response.json()["data"]["id"]

        response = await client.put(f"/admin/missions/{mission_id}", json={"reward_points": 20}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["reward_points"] == 20
        assert response.json()["data"]["title"] == "Hydrate"

        response = await client.delete(f"/admin/missions/{mission_id}", headers=admin_headers)
        assert response.status_code == 200
        assert await fetch_scalar(select(func.count(Mission.id))) == 0

    async def test_empty_update_rejected(self, client: AsyncClient, admin_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="One", reward_points=5))
        response = await client.put("/admin/missions/1", json={}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "At least one field is required to update"

    async def test_negative_reward_rejected(self, client: AsyncClient, admin_headers: dict[str, str]):
        response = await client.post(
            "/admin/missions/create", json={"title": "Bad", "reward_points": -5}, headers=admin_headers
        )
        assert response.status_code == 400

    async def test_delete_unknown(self, client: AsyncClient, admin_headers: dict[str, str]):
        response = await client.delete("/admin/missions/42", headers=admin_headers)
        assert response.status_code == 404

"""Integration tests for the starting and ending milestones of a journey."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from questline.db.models import Mission
from tests.conftest import add_rows, register_and_login

START = {"title": "My Journey", "description": "Getting to know the community"}


@pytest.mark.asyncio
class TestStarting:
    async def test_status_before_start(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.get("/api/starting/status", headers=user_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["data"] == {"has_started": False, "starting": None}
        assert body["message"] == "Journey not started yet"

    async def test_create_and_read(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/api/starting/create", json=START, headers=user_headers)
        assert response.status_code == 201
        starting = response.json()["data"]
        assert starting["status"] == "active"

        status = (await client.get("/api/starting/status", headers=user_headers)).json()["data"]
        assert status["has_started"] is True
        assert status["starting"]["title"] == "My Journey"

        check = (await client.get("/api/journey/start-check", headers=user_headers)).json()["data"]
        assert check == {"journey_started": True}

        by_id = await client.get(f"/api/starting/{starting['id']}", headers=user_headers)
        assert by_id.json()["data"]["description"] == "Getting to know the community"

    async def test_requires_title_and_description(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/api/starting/create", json={"title": "Only title"}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Title and description are required"

    async def test_only_one_starting_per_user(self, client: AsyncClient, user_headers: dict[str, str]):
        await client.post("/api/starting/create", json=START, headers=user_headers)
        response = await client.post("/api/starting/create", json=START, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Journey already started"

    async def test_update_status(self, client: AsyncClient, user_headers: dict[str, str]):
        starting = (await client.post("/api/starting/create", json=START, headers=user_headers)).json()["data"]
        response = await client.put(
            f"/api/starting/{starting['id']}", json={"status": "paused"}, headers=user_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "paused"

    async def test_cannot_read_another_users_starting(self, client: AsyncClient):
        _alice, alice = await register_and_login(client, email="alice@example.com", name="Alice")
        _bob, bob = await register_and_login(client, email="bob@example.com", name="Bob")
        starting = (await client.post("/api/starting/create", json=START, headers=alice)).json()["data"]

        response = await client.get(f"/api/starting/{starting['id']}", headers=bob)
        assert response.status_code == 404
        assert response.json()["message"] == "Starting journey not found"

    async def test_progress_counts_completed_missions(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="One", reward_points=30))
        await client.post("/api/starting/create", json=START, headers=user_headers)
        await client.post("/missions/1/complete", headers=user_headers)

        progress = (await client.get("/api/starting/progress", headers=user_headers)).json()["data"]
        assert progress["missions_completed"] == 1
        assert progress["quizzes_passed"] == 0
        assert progress["total_points"] == 30

    async def test_progress_without_starting(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.get("/api/starting/progress", headers=user_headers)
        assert response.status_code == 404


@pytest.mark.asyncio
class TestEnding:
    async def test_ending_requires_starting(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/api/ending/create", json={"title": "Done"}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Start your journey first"

    async def test_complete_journey(self, client: AsyncClient, user_headers: dict[str, str]):
        await client.post("/api/starting/create", json=START, headers=user_headers)
        response = await client.post(
            "/api/ending/create", json={"title": "Finished", "description": "It was fun"}, headers=user_headers
        )
        assert response.status_code == 201
        ending = response.json()["data"]
        assert ending["status"] == "completed"

        status = (await client.get("/api/starting/status", headers=user_headers)).json()["data"]
        assert status["starting"]["status"] == "completed"

        check = (await client.get("/api/journey/completion-check", headers=user_headers)).json()["data"]
        assert check == {"journey_completed": True}

        fetched = (await client.get(f"/api/ending/{ending['id']}", headers=user_headers)).json()["data"]
        assert fetched["title"] == "Finished"

        stats = (await client.get("/api/ending/stats", headers=user_headers)).json()["data"]
        assert stats["total_endings"] == 1
        assert stats["latest_status"] == "completed"

    async def test_only_one_ending(self, client: AsyncClient, user_headers: dict[str, str]):
        await client.post("/api/starting/create", json=START, headers=user_headers)
        await client.post("/api/ending/create", json={"title": "Finished"}, headers=user_headers)
        response = await client.post("/api/ending/create", json={"title": "Again"}, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Journey already completed"

    async def test_ending_empty_state(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.get("/api/ending", headers=user_headers)
        body = response.json()
        assert body["data"] is None
        assert body["message"] == "No ending found"

        stats = (await client.get("/api/ending/stats", headers=user_headers)).json()["data"]
        assert stats == {"total_endings": 0, "most_recent_ending": None, "latest_status": None}

    async def test_summary(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="One", reward_points=10))
        await client.post("/missions/1/complete", headers=user_headers)
        summary = (await client.get("/api/ending/summary", headers=user_headers)).json()["data"]
        assert summary["missions_completed"] == 1
        assert summary["total_friends"] == 0
        assert summary["last_ending_date"] is None

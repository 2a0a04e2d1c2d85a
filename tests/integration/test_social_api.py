"""Integration tests for friends, volunteering and the activity log."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from questline.db.models import Mission, VolunteerActivity
from tests.conftest import add_rows, register_and_login


async def _two_users(client: AsyncClient) -> tuple[dict, dict[str, str], dict, dict[str, str]]:
    alice, alice_headers = await register_and_login(client, email="alice@example.com", name="Alice")
    bob, bob_headers = await register_and_login(client, email="bob@example.com", name="Bob")
    return alice, alice_headers, bob, bob_headers


@pytest.mark.asyncio
class TestFriends:
    async def test_request_and_accept(self, client: AsyncClient):
        alice, alice_headers, bob, bob_headers = await _two_users(client)

        response = await client.post(f"/api/friends/{bob['id']}/request", headers=alice_headers)
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "pending"

        # Pending requests are not friends yet
        assert (await client.get("/api/friends", headers=alice_headers)).json()["count"] == 0

        response = await client.post(f"/api/friends/{alice['id']}/accept", headers=bob_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "accepted"

    async def test_friend_list_shows_counterparty_for_both_sides(self, client: AsyncClient):
        alice, alice_headers, bob, bob_headers = await _two_users(client)
        await client.post(f"/api/friends/{bob['id']}/request", headers=alice_headers)
        await client.post(f"/api/friends/{alice['id']}/accept", headers=bob_headers)

        alice_view = (await client.get("/api/friends", headers=alice_headers)).json()
        assert alice_view["count"] == 1
        assert alice_view["data"]["friends"][0]["friend_id"] == bob["id"]
        assert alice_view["data"]["friends"][0]["friend_name"] == "Bob"

        bob_view = (await client.get("/api/friends", headers=bob_headers)).json()
        assert bob_view["data"]["friends"][0]["friend_id"] == alice["id"]
        assert bob_view["data"]["friends"][0]["friend_name"] == "Alice"

    async def test_friendship_details_from_either_side(self, client: AsyncClient):
        alice, alice_headers, bob, bob_headers = await _two_users(client)
        await client.post(f"/api/friends/{bob['id']}/request", headers=alice_headers)

        details = (await client.get(f"/api/friends/{alice['id']}/details", headers=bob_headers)).json()["data"]
        assert details["friend_name"] == "Alice"
        assert details["requested_by"] == alice["id"]
        assert details["status"] == "pending"

    async def test_duplicate_request_in_either_direction(self, client: AsyncClient):
        alice, alice_headers, bob, bob_headers = await _two_users(client)
        await client.post(f"/api/friends/{bob['id']}/request", headers=alice_headers)
        response = await client.post(f"/api/friends/{alice['id']}/request", headers=bob_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Friendship already exists"

    async def test_self_request_rejected(self, client: AsyncClient):
        alice, alice_headers, _bob, _ = await _two_users(client)
        response = await client.post(f"/api/friends/{alice['id']}/request", headers=alice_headers)
        assert response.status_code == 400

    async def test_request_to_unknown_user(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/api/friends/999/request", headers=user_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    async def test_requester_cannot_accept_own_request(self, client: AsyncClient):
        alice, alice_headers, bob, _bob_headers = await _two_users(client)
        await client.post(f"/api/friends/{bob['id']}/request", headers=alice_headers)
        response = await client.post(f"/api/friends/{bob['id']}/accept", headers=alice_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Friend request not found"

    async def test_unknown_friendship_details(self, client: AsyncClient):
        _alice, alice_headers, bob, _ = await _two_users(client)
        response = await client.get(f"/api/friends/{bob['id']}/details", headers=alice_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Friendship not found"


@pytest.mark.asyncio
class TestVolunteering:
    async def test_register_and_list(self, client: AsyncClient, user_headers: dict[str, str]):
        start = datetime.now(timezone.utc) + timedelta(days=3)
        await add_rows(
            VolunteerActivity(id=1, title="Park clean-up", location="Central Park", start_date=start, end_date=start + timedelta(hours=3))
        )

        open_list = (await client.get("/api/volunteer/open", headers=user_headers)).json()
        assert open_list["count"] == 1
        assert open_list["data"][0]["total_volunteers"] == 0

        response = await client.post("/api/volunteer/1/register", headers=user_headers)
        assert response.status_code == 201
        assert response.json()["data"]["status"] == "registered"

        mine = (await client.get("/api/volunteer-activities", headers=user_headers)).json()
        assert mine["count"] == 1
        assert mine["data"]["activities"][0]["title"] == "Park clean-up"
        assert mine["data"]["activities"][0]["total_volunteers"] == 1

        details = (await client.get("/api/volunteer/1/details", headers=user_headers)).json()["data"]
        assert details["location"] == "Central Park"

    async def test_double_registration_rejected(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(VolunteerActivity(id=1, title="Food bank shift"))
        await client.post("/api/volunteer/1/register", headers=user_headers)
        response = await client.post("/api/volunteer/1/register", headers=user_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Already registered for this activity"

    async def test_unknown_activity(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/api/volunteer/9/register", headers=user_headers)
        assert response.status_code == 404

    async def test_details_without_registration(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(VolunteerActivity(id=1, title="Food bank shift"))
        response = await client.get("/api/volunteer/1/details", headers=user_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Volunteer activity registration not found"


@pytest.mark.asyncio
class TestActivityLog:
    async def test_new_user_summary_is_zero(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.get("/api/activity-log", headers=user_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_missions_completed"] == 0
        assert data["total_quizzes_passed"] == 0
        assert data["total_volunteer_activities"] == 0
        assert data["total_friends"] == 0
        assert data["total_points"] == 0
        assert data["onboarding_date"] is not None

    async def test_summary_counts_progress(self, client: AsyncClient):
        alice, alice_headers, bob, bob_headers = await _two_users(client)
        await add_rows(Mission(id=1, title="One", reward_points=20), VolunteerActivity(id=1, title="Shift"))
        await client.post("/missions/1/complete", headers=alice_headers)
        await client.post("/api/volunteer/1/register", headers=alice_headers)
        await client.post(f"/api/friends/{bob['id']}/request", headers=alice_headers)
        await client.post(f"/api/friends/{alice['id']}/accept", headers=bob_headers)

        data = (await client.get("/api/activity-log", headers=alice_headers)).json()["data"]
        assert data["total_missions_completed"] == 1
        assert data["total_volunteer_activities"] == 1
        assert data["total_friends"] == 1
        assert data["total_points"] == 20

    async def test_activity_feed_newest_first(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="One", reward_points=5), Mission(id=2, title="Two", reward_points=5))
        await client.post("/missions/1/complete", headers=user_headers)
        await client.post("/missions/2/complete", headers=user_headers)

        feed = (await client.get("/api/activity-feed", headers=user_headers)).json()
        assert feed["data"]["total"] == 2
        assert [item["title"] for item in feed["data"]["items"]] == [
            "Completed mission: Two",
            "Completed mission: One",
        ]

    async def test_activity_feed_filters_by_type(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="One", reward_points=5), VolunteerActivity(id=1, title="Shift"))
        await client.post("/missions/1/complete", headers=user_headers)
        await client.post("/api/volunteer/1/register", headers=user_headers)

        feed = (await client.get("/api/activity-feed", params={"type": "volunteer_registered"}, headers=user_headers)).json()
        assert feed["data"]["total"] == 1
        assert feed["data"]["items"][0]["title"] == "Volunteering: Shift"
        assert feed["data"]["items"][0]["metadata"] == {"activity_id": 1}

    async def test_completed_missions_and_details(self, client: AsyncClient, user_headers: dict[str, str]):
        await add_rows(Mission(id=1, title="One", reward_points=5, difficulty="easy"))
        await client.post("/missions/1/complete", headers=user_headers)

        completed = (await client.get("/api/missions-completed", headers=user_headers)).json()
        assert completed["count"] == 1
        details = (await client.get("/api/missions/1/completion-details", headers=user_headers)).json()["data"]
        assert details["completion_count"] == 1
        assert details["difficulty"] == "easy"

        missing = await client.get("/api/missions/2/completion-details", headers=user_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Mission completion record not found"

    async def test_onboarding_info(self, client: AsyncClient, user_headers: dict[str, str]):
        data = (await client.get("/api/onboarding-info", headers=user_headers)).json()["data"]
        assert data["email"] == "player@example.com"
        assert data["onboarding_date"] is not None

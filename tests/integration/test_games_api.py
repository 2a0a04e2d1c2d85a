"""Integration tests for the game catalog, play-throughs and ratings."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from questline.db.models import Game, User
from tests.conftest import add_rows, fetch_scalar, register_and_login


async def _seed_games() -> None:
    await add_rows(
        Game(id=1, title="Word Sprint", description="Fast word finding", genre="puzzle", difficulty_level="easy", reward_points=15),
        Game(id=2, title="Logic Grid", description="Deduce from clues", genre="puzzle", difficulty_level="hard", reward_points=40),
        Game(id=3, title="Quick Math", description="Arithmetic race", genre="arcade", difficulty_level="medium", reward_points=25),
        Game(id=4, title="Retired", genre="arcade", difficulty_level="easy", reward_points=5, status="archived"),
    )


@pytest.mark.asyncio
class TestGameCatalog:
    async def test_list_only_active(self, client: AsyncClient):
        await _seed_games()
        response = await client.get("/games")
        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 3
        assert "Retired" not in {g["title"] for g in body["data"]}

    async def test_search_is_case_insensitive(self, client: AsyncClient):
        await _seed_games()
        response = await client.get("/games/search", params={"query": "PUZZLE"})
        assert response.status_code == 200
        titles = {g["title"] for g in response.json()["data"]}
        assert titles == {"Word Sprint", "Logic Grid"}

    async def test_search_requires_query(self, client: AsyncClient):
        response = await client.get("/games/search")
        assert response.status_code == 400
        assert response.json()["message"] == "Search query is required"

    async def test_by_difficulty(self, client: AsyncClient):
        await _seed_games()
        response = await client.get("/games/difficulty/easy")
        assert [g["title"] for g in response.json()["data"]] == ["Word Sprint"]

    async def test_details(self, client: AsyncClient):
        await _seed_games()
        response = await client.get("/games/2")
        data = response.json()["data"]
        assert data["title"] == "Logic Grid"
        assert data["total_completions"] == 0
        assert data["average_rating"] == 0.0

    async def test_unknown_game(self, client: AsyncClient):
        response = await client.get("/games/99")
        assert response.status_code == 404
        assert response.json()["message"] == "Game not found"


@pytest.mark.asyncio
class TestPlayAndRate:
    async def test_complete_awards_points_every_time(self, client: AsyncClient):
        await _seed_games()
        user, headers = await register_and_login(client)

        response = await client.post("/games/3/complete", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Game completed! You earned 25 points."
        await client.post("/games/3/complete", headers=headers)

        assert await fetch_scalar(select(User.total_points).where(User.id == user["id"])) == 50
        details = (await client.get("/games/3")).json()["data"]
        assert details["total_completions"] == 2

    async def test_archived_game_cannot_be_completed(self, client: AsyncClient):
        await _seed_games()
        _user, headers = await register_and_login(client)
        response = await client.post("/games/4/complete", headers=headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Game is not available"

    async def test_rating_overwrites_and_averages(self, client: AsyncClient):
        await _seed_games()
        _alice, alice = await register_and_login(client, email="alice@example.com", name="Alice")
        _bob, bob = await register_and_login(client, email="bob@example.com", name="Bob")

        await client.post("/games/1/rate", json={"rating": 2}, headers=alice)
        await client.post("/games/1/rate", json={"rating": 4}, headers=alice)
        response = await client.post("/games/1/rate", json={"rating": 5}, headers=bob)
        assert response.status_code == 200
        assert response.json()["data"]["average_rating"] == 4.5

    async def test_rating_out_of_range(self, client: AsyncClient):
        await _seed_games()
        _user, headers = await register_and_login(client)
        response = await client.post("/games/1/rate", json={"rating": 6}, headers=headers)
        assert response.status_code == 400


@pytest.mark.asyncio
class TestAdminGames:
    async def test_create_update_and_stats(self, client: AsyncClient, admin_headers: dict[str, str]):
        response = await client.post(
            "/admin/games/create",
            json={"title": "Memory Match", "genre": "memory", "difficulty_level": "easy", "reward_points": 10},
            headers=admin_headers,
        )
        assert response.status_code == 201
        game_id = response.json()["data"]["id"]

        response = await client.put(f"/admin/games/{game_id}", json={"reward_points": 12}, headers=admin_headers)
        assert response.json()["data"]["reward_points"] == 12

        await client.post(f"/games/{game_id}/complete", headers=admin_headers)
        stats = (await client.get(f"/admin/games/{game_id}/stats", headers=admin_headers)).json()["data"]
        assert stats["total_completions"] == 1
        assert stats["unique_players"] == 1
        assert stats["total_rewards_distributed"] == 12

    async def test_empty_update_rejected(self, client: AsyncClient, admin_headers: dict[str, str]):
        await _seed_games()
        response = await client.put("/admin/games/1", json={}, headers=admin_headers)
        assert response.status_code == 400

    async def test_players_cannot_manage_games(self, client: AsyncClient, user_headers: dict[str, str]):
        response = await client.post("/admin/games/create", json={"title": "Nope"}, headers=user_headers)
        assert response.status_code == 403
        assert await fetch_scalar(select(Game.id)) is None

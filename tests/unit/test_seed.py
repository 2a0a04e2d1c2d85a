"""Tests for the starter catalog seed."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from questline.database import get_session
from questline.db.models import Mission, QuizQuestion
from questline.seed import GAME_SEED_DATA, MISSION_SEED_DATA, QUIZ_SEED_DATA, VOLUNTEER_SEED_DATA, seed_catalog
from tests.conftest import fetch_scalar


async def _seed() -> int:
    async for db in get_session():
        return await seed_catalog(db)
    return 0


@pytest.mark.asyncio
async def test_seed_inserts_catalog(client: AsyncClient):
    inserted = await _seed()
    questions = sum(len(q["questions"]) for q in QUIZ_SEED_DATA)
    expected = len(MISSION_SEED_DATA) + len(QUIZ_SEED_DATA) + questions + len(GAME_SEED_DATA) + len(VOLUNTEER_SEED_DATA)
    assert inserted == expected
    assert await fetch_scalar(select(func.count(Mission.id))) == len(MISSION_SEED_DATA)
    assert await fetch_scalar(select(func.count(QuizQuestion.id))) > 0

    response = await client.get("/games")
    assert response.json()["count"] == len(GAME_SEED_DATA)


@pytest.mark.asyncio
async def test_seed_is_idempotent(client: AsyncClient):
    await _seed()
    assert await _seed() == 0
    assert await fetch_scalar(select(func.count(Mission.id))) == len(MISSION_SEED_DATA)

"""Games catalog API: public browsing, authenticated play/rate, admin management."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from questline.auth.dependencies import get_current_admin, get_current_user
from questline.database import get_session
from questline.db.models import User
from questline.games import game_service
from questline.games.schemas import GameCreate, GameRatingRequest, GameUpdate
from questline.schemas import envelope

router = APIRouter(prefix="/games", tags=["Games"])
admin_router = APIRouter(prefix="/admin/games", tags=["Admin"])

GameId = Annotated[int, Path(ge=1, description="Game ID")]

# Static paths are registered before /{game_id} so they are matched first.


@router.get("")
async def list_games(db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    games = await game_service.list_games(db)
    return envelope(games, "Games retrieved successfully", count=len(games))


@router.get("/search")
async def search_games(
    query: str | None = Query(None, max_length=100),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    games = await game_service.search_games(db, query)
    return envelope(games, f"Found {len(games)} games", count=len(games))


@router.get("/difficulty/{difficulty_level}")
async def games_by_difficulty(
    difficulty_level: str,
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    games = await game_service.get_games_by_difficulty(db, difficulty_level)
    return envelope(games, "Games retrieved successfully", count=len(games))


@router.get("/{game_id}")
async def get_game(game_id: GameId, db: AsyncSession = Depends(get_session)) -> dict[str, Any]:
    game = await game_service.get_game(db, game_id)
    return envelope(game, "Game retrieved successfully")


@router.post("/{game_id}/complete")
async def complete_game(
    game_id: GameId,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    user_id = user.id
    result = await game_service.complete_game(db, game_id, user_id)
    await db.commit()
    return envelope(result, f"Game completed! You earned {result['reward_points']} points.")


@router.post("/{game_id}/rate")
async def rate_game(
    game_id: GameId,
    body: GameRatingRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    result = await game_service.rate_game(db, game_id, user.id, body.rating)
    await db.commit()
    return envelope(result, "Rating saved")


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@admin_router.post("/create", status_code=201)
async def admin_create_game(
    body: GameCreate,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    game = await game_service.create_game(db, body)
    await db.commit()
    return envelope(game_service.game_to_dict(game), "Game created successfully")


@admin_router.put("/{game_id}")
async def admin_update_game(
    game_id: GameId,
    body: GameUpdate,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    game = await game_service.update_game(db, game_id, body)
    await db.commit()
    return envelope(game_service.game_to_dict(game), "Game updated successfully")


@admin_router.get("/{game_id}/stats")
async def admin_game_stats(
    game_id: GameId,
    _admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_session),
) -> dict[str, Any]:
    stats = await game_service.get_game_stats(db, game_id)
    return envelope(stats, "Game statistics retrieved successfully")

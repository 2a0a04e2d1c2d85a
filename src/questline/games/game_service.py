"""Game catalog service.

Statistics (completions, ratings, players) are recomputed with correlated
subqueries on every read; nothing is cached or denormalized.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from sqlalchemy import distinct, func, or_, select

from questline.db.models import Game, GameCompletion, GameRating
from questline.errors import NotFoundError, ServiceError
from questline.social.activity_service import record_activity
from questline.users.points import award_points

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from questline.games.schemas import GameCreate, GameUpdate

logger = logging.getLogger(__name__)

GAME_NOT_FOUND = "Game not found"


def game_to_dict(game: Game) -> dict[str, Any]:
    return {
        "id": game.id,
        "title": game.title,
        "description": game.description,
        "genre": game.genre,
        "difficulty_level": game.difficulty_level,
        "reward_points": game.reward_points,
        "image_url": game.image_url,
        "status": game.status,
        "created_at": game.created_at,
    }


def _completion_count() -> Any:  # noqa: ANN401
    return (
        select(func.count(GameCompletion.id))
        .where(GameCompletion.game_id == Game.id)
        .correlate(Game)
        .scalar_subquery()
    )


def _average_rating() -> Any:  # noqa: ANN401
    return select(func.avg(GameRating.rating)).where(GameRating.game_id == Game.id).correlate(Game).scalar_subquery()


def _round_rating(value: Any) -> float:  # noqa: ANN401
    return round(float(value), 2) if value is not None else 0.0


async def get_game_row(db: AsyncSession, game_id: int) -> Game:
    result = await db.execute(select(Game).where(Game.id == game_id))
    game = result.scalar_one_or_none()
    if game is None:
        raise NotFoundError(GAME_NOT_FOUND)
    return game


async def list_games(db: AsyncSession) -> list[dict[str, Any]]:
    """Active games, newest first."""
    result = await db.execute(
        select(Game).where(Game.status == "active").order_by(Game.created_at.desc(), Game.id.desc())
    )
    return [game_to_dict(g) for g in result.scalars().all()]


async def get_game(db: AsyncSession, game_id: int) -> dict[str, Any]:
    """Game details with total completions and average rating."""
    row = (
        await db.execute(
            select(
                Game,
                _completion_count().label("total_completions"),
                _average_rating().label("average_rating"),
            ).where(Game.id == game_id)
        )
    ).first()
    if row is None:
        raise NotFoundError(GAME_NOT_FOUND)
    data = game_to_dict(row.Game)
    data["total_completions"] = int(row.total_completions or 0)
    data["average_rating"] = _round_rating(row.average_rating)
    return data


async def search_games(db: AsyncSession, query: str | None) -> list[dict[str, Any]]:
    """Case-insensitive substring search over title, genre and description (active games only)."""
    if not query or not query.strip():
        msg = "Search query is required"
        raise ServiceError(msg)
    pattern = f"%{query.strip().lower()}%"
    result = await db.execute(
        select(Game)
        .where(Game.status == "active")
        .where(
            or_(
                func.lower(Game.title).like(pattern),
                func.lower(Game.genre).like(pattern),
                func.lower(Game.description).like(pattern),
            )
        )
        .order_by(Game.title)
    )
    return [game_to_dict(g) for g in result.scalars().all()]


async def get_games_by_difficulty(db: AsyncSession, difficulty_level: str) -> list[dict[str, Any]]:
    result = await db.execute(
        select(Game)
        .where(Game.status == "active")
        .where(func.lower(Game.difficulty_level) == difficulty_level.strip().lower())
        .order_by(Game.created_at.desc(), Game.id.desc())
    )
    return [game_to_dict(g) for g in result.scalars().all()]


async def complete_game(db: AsyncSession, game_id: int, user_id: int) -> dict[str, Any]:
    """Record a play-through and award the game's points in the caller's transaction."""
    game = await get_game_row(db, game_id)
    if game.status != "active":
        msg = "Game is not available"
        raise ServiceError(msg)

    completion = GameCompletion(user_id=user_id, game_id=game.id, completed_at=datetime.now(timezone.utc))
    db.add(completion)
    await db.flush()
    total = await award_points(db, user_id, game.reward_points, source=f"game:{game.id}")
    await record_activity(
        db,
        user_id,
        "game_completed",
        f"Completed game: {game.title}",
        metadata={"game_id": game.id, "reward_points": game.reward_points},
    )
    logger.info("Game %s completed by user %s (+%s points)", game.id, user_id, game.reward_points)
    return {
        "completion_id": completion.id,
        "game_id": game.id,
        "reward_points": game.reward_points,
        "completed_at": completion.completed_at,
        "user_total_points": total,
    }


async def rate_game(db: AsyncSession, game_id: int, user_id: int, rating: int) -> dict[str, Any]:
    """Create or overwrite the user's 1-5 rating for a game."""
    if not 1 <= rating <= 5:
        msg = "Rating must be between 1 and 5"
        raise ServiceError(msg)
    game = await get_game_row(db, game_id)

    result = await db.execute(
        select(GameRating).where(GameRating.game_id == game.id, GameRating.user_id == user_id)
    )
    existing = result.scalar_one_or_none()
    if existing is None:
        db.add(GameRating(user_id=user_id, game_id=game.id, rating=rating, created_at=datetime.now(timezone.utc)))
    else:
        existing.rating = rating
    await db.flush()

    average = (await db.execute(select(func.avg(GameRating.rating)).where(GameRating.game_id == game.id))).scalar()
    return {"game_id": game.id, "rating": rating, "average_rating": _round_rating(average)}


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


async def create_game(db: AsyncSession, data: GameCreate) -> Game:
    game = Game(**data.model_dump(), created_at=datetime.now(timezone.utc))
    db.add(game)
    await db.flush()
    logger.info("Game %s created: %s", game.id, game.title)
    return game


async def update_game(db: AsyncSession, game_id: int, changes: GameUpdate) -> Game:
    """
    Apply a partial update.

    Raises:
        ServiceError: If the body carries no fields or nulls a required one.
        NotFoundError: Unknown game.
    """
    fields = changes.model_dump(exclude_unset=True)
    if not fields:
        msg = "At least one field is required to update"
        raise ServiceError(msg)
    for required in ("title", "reward_points", "status"):
        if required in fields and fields[required] is None:
            msg = f"{required} cannot be null"
            raise ServiceError(msg)

    game = await get_game_row(db, game_id)
    for key, value in fields.items():
        setattr(game, key, value)
    await db.flush()
    logger.info("Game %s updated: %s", game.id, ", ".join(sorted(fields)))
    return game


async def get_game_stats(db: AsyncSession, game_id: int) -> dict[str, Any]:
    game = await get_game_row(db, game_id)
    completions, players = (
        await db.execute(
            select(func.count(GameCompletion.id), func.count(distinct(GameCompletion.user_id))).where(
                GameCompletion.game_id == game_id
            )
        )
    ).one()
    average, ratings = (
        await db.execute(
            select(func.avg(GameRating.rating), func.count(GameRating.id)).where(GameRating.game_id == game_id)
        )
    ).one()
    total_completions = int(completions or 0)
    return {
        "game_id": game.id,
        "title": game.title,
        "total_completions": total_completions,
        "unique_players": int(players or 0),
        "average_rating": _round_rating(average),
        "total_ratings": int(ratings or 0),
        "total_rewards_distributed": game.reward_points * total_completions,
    }

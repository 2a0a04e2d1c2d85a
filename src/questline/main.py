"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from questline.auth.router import router as auth_router
from questline.config import get_settings
from questline.database import close_db, get_session, init_db
from questline.games.router import admin_router as admin_games_router
from questline.games.router import router as games_router
from questline.health.router import router as health_router
from questline.journey.router import router as journey_router
from questline.middleware import setup_middleware
from questline.missions.router import admin_router as admin_missions_router
from questline.missions.router import router as missions_router
from questline.pages.router import router as pages_router
from questline.quizzes.router import admin_router as admin_quizzes_router
from questline.quizzes.router import router as quizzes_router
from questline.redis_client import close_redis, init_redis
from questline.seed import seed_catalog
from questline.social.router import router as social_router
from questline.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    # Seed the starter catalog (idempotent)
    if settings.seed_catalog:
        try:
            async for db in get_session():
                await seed_catalog(db)
                break
        except Exception:
            logging.getLogger(__name__).warning("Catalog seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Questline",
        description="Gamified onboarding: missions, quizzes, games and a personal journey",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    # Pages first: /games/display must not fall through to /games/{game_id}
    app.include_router(pages_router)
    app.include_router(missions_router)
    app.include_router(admin_missions_router)
    app.include_router(quizzes_router)
    app.include_router(admin_quizzes_router)
    app.include_router(games_router)
    app.include_router(admin_games_router)
    app.include_router(journey_router)
    app.include_router(social_router)

    return app


app = create_app()

"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bitbridge.config import get_settings
from bitbridge.database import close_db, init_db
from bitbridge.gamification.router import router as levels_router
from bitbridge.health.router import router as health_router
from bitbridge.middleware import setup_middleware
from bitbridge.profiles.router import router as profiles_router
from bitbridge.projects.router import router as projects_router
from bitbridge.redis_client import close_redis, init_redis


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="BitBridge API",
        description="Backend API for BitBridge — collaborative side-projects with XP, levels and rewards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(levels_router)
    app.include_router(profiles_router)
    app.include_router(projects_router)

    return app


app = create_app()

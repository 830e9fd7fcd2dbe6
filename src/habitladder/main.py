"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from habitladder.activities.router import router as activities_router
from habitladder.admin.router import router as admin_router
from habitladder.applications.router import router as applications_router
from habitladder.auth.router import router as auth_router
from habitladder.completions.router import router as completions_router
from habitladder.config import Settings, get_settings
from habitladder.database import Database
from habitladder.health.router import router as health_router
from habitladder.ladder.router import router as ladder_router
from habitladder.middleware import setup_middleware
from habitladder.pages.router import router as pages_router
from habitladder.progress.router import router as progress_router
from habitladder.todos.router import router as todos_router
from habitladder.tracking.router import router as tracking_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    database: Database = app.state.database
    await database.connect()
    if app.state.settings.create_schema:
        await database.create_all()
        logger.info("schema_created")

    yield

    await database.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Habit Ladder API",
        description=(
            "Backend for the habit ladder program: applications, weekly questions, "
            "habits, goals, todos, activities, progress and streaks"
        ),
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings.database_url, settings)

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(progress_router)
    app.include_router(completions_router)
    app.include_router(tracking_router)
    app.include_router(activities_router)
    app.include_router(todos_router)
    app.include_router(ladder_router)
    app.include_router(applications_router)
    app.include_router(admin_router)
    app.include_router(pages_router)

    return app


app = create_app()

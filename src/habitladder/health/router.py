"""Health, readiness, and version endpoints."""

import structlog
from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from habitladder.config import settings_for
from habitladder.database import Database
from habitladder.errors import StorageError

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, object]:
    """Readiness probe: checks database connectivity."""
    database: Database = request.app.state.database
    checks: dict[str, object] = {}

    try:
        async with database.session() as db:
            result = await db.execute(text("SELECT 1"))
            result.scalar()
        checks["database"] = "ok"
    except (StorageError, SQLAlchemyError) as exc:
        logger.warning("readiness_check_failed", check="database", error_type=type(exc).__name__, error=str(exc))
        checks["database"] = "error"

    all_ok = all(v == "ok" for v in checks.values())
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version(request: Request) -> dict[str, str]:
    """Return API version and environment."""
    settings = settings_for(request)
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }

"""Progress endpoints: /api/goals/progress and /api/habits/progress."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.database import get_session
from habitladder.progress.schemas import ProgressEnvelope, ThemeUpdateRequest, progress_response
from habitladder.progress.store import get_or_create_progress, save_progress

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Progress"])


@router.get("/goals/progress", response_model=ProgressEnvelope)
async def get_goal_progress(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProgressEnvelope:
    """Get (or lazily create) the caller's ladder progress."""
    progress = await get_or_create_progress(db, identity.id)
    return progress_response(progress)


@router.get("/habits/progress", response_model=ProgressEnvelope)
async def get_habit_progress(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProgressEnvelope:
    progress = await get_or_create_progress(db, identity.id)
    return progress_response(progress)


@router.put("/habits/progress", response_model=ProgressEnvelope)
async def update_ladder_theme(
    body: ThemeUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ProgressEnvelope:
    """Change the ladder theme."""
    progress = await get_or_create_progress(db, identity.id)
    progress.ladder_theme = body.ladder_theme
    progress = await save_progress(db, progress)
    logger.info("ladder_theme_changed", user_id=identity.id, theme=body.ladder_theme)
    return progress_response(progress)

"""Ladder progress persistence: race-safe get-or-create and save."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import LadderProgress, as_utc, utcnow

logger = structlog.get_logger()


async def find_progress(db: AsyncSession, user_id: int) -> LadderProgress | None:
    result = await db.execute(select(LadderProgress).where(LadderProgress.user_id == user_id))
    return result.scalar_one_or_none()


async def get_or_create_progress(db: AsyncSession, user_id: int) -> LadderProgress:
    """Get the user's progress row, creating it with defaults on first access.

    Concurrent first requests race on the unique ``user_id`` constraint; the
    loser rolls back and re-reads the winner's row.
    """
    progress = await find_progress(db, user_id)
    if progress is not None:
        return progress

    now = utcnow()
    progress = LadderProgress(
        user_id=user_id,
        current_level=0,
        total_points=0,
        weekly_points=0,
        current_streak=0,
        longest_streak=0,
        completed_challenges=0,
        achievements=[],
        ladder_theme="classic",
        challenge_start_date=now,
        updated_at=now,
    )
    db.add(progress)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await find_progress(db, user_id)
        if existing is None:
            # the constraint that fired was not the user_id one
            raise
        logger.info("progress_create_race_lost", user_id=user_id)
        return existing

    logger.info("progress_created", user_id=user_id)
    return progress


async def save_progress(db: AsyncSession, progress: LadderProgress) -> LadderProgress:
    """Persist ``progress``, always advancing ``updated_at``."""
    now = utcnow()
    previous = progress.updated_at
    progress.updated_at = max(now, as_utc(previous)) if previous is not None else now
    db.add(progress)
    await db.commit()
    return progress

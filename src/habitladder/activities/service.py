"""Activities: per-user CRUD, completions and a short progress summary."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import Activity, ActivityCompletion, LadderProgress, Todo, as_utc, utcnow
from habitladder.errors import ForbiddenError, NotFoundError, ValidationError
from habitladder.progress.rules import apply_activity_completion, point_value_for
from habitladder.progress.store import find_progress, get_or_create_progress, save_progress

logger = structlog.get_logger()

RECENT_WINDOW = timedelta(days=7)

_UPDATABLE = frozenset(
    {"title", "description", "intensity", "category", "target_frequency", "is_active", "is_recurring", "deadline"}
)
_NULLABLE = frozenset({"description", "deadline"})


async def list_activities(
    db: AsyncSession, user_id: int, *, category: str | None = None, is_active: bool | None = None
) -> list[Activity]:
    stmt = select(Activity).where(Activity.user_id == user_id)
    if category is not None:
        stmt = stmt.where(Activity.category == category)
    if is_active is not None:
        stmt = stmt.where(Activity.is_active.is_(is_active))
    result = await db.execute(stmt.order_by(Activity.created_at.desc(), Activity.id.desc()))
    return list(result.scalars().all())


async def get_activity(db: AsyncSession, user_id: int, activity_id: int) -> Activity:
    result = await db.execute(select(Activity).where(Activity.id == activity_id, Activity.user_id == user_id))
    activity = result.scalar_one_or_none()
    if activity is None:
        raise NotFoundError("Activity", activity_id)
    return activity


async def create_activity(
    db: AsyncSession,
    user_id: int,
    *,
    title: str,
    description: str | None = None,
    intensity: str = "medium",
    category: str = "other",
    target_frequency: str = "none",
    is_recurring: bool = False,
    deadline: datetime | None = None,
) -> Activity:
    if not title.strip():
        raise ValidationError("title", "Please provide a title")
    now = utcnow()
    activity = Activity(
        user_id=user_id,
        title=title.strip(),
        description=description,
        intensity=intensity,
        category=category,
        target_frequency=target_frequency,
        point_value=point_value_for(intensity),
        is_active=True,
        is_recurring=is_recurring,
        deadline=as_utc(deadline) if deadline is not None else None,
        created_at=now,
        updated_at=now,
    )
    db.add(activity)
    await db.commit()
    logger.info("activity_created", user_id=user_id, activity_id=activity.id, point_value=activity.point_value)
    return activity


async def update_activity(db: AsyncSession, user_id: int, activity_id: int, changes: dict[str, Any]) -> Activity:
    """Partial update. A new intensity re-derives the point value."""
    changes = {k: v for k, v in changes.items() if k in _UPDATABLE}
    for key, value in changes.items():
        if value is None and key not in _NULLABLE:
            raise ValidationError(key, f"{key} cannot be null")

    activity = await get_activity(db, user_id, activity_id)
    for key, value in changes.items():
        setattr(activity, key, value)
    if "intensity" in changes:
        activity.point_value = point_value_for(changes["intensity"])
    activity.updated_at = utcnow()
    await db.commit()
    logger.info("activity_updated", user_id=user_id, activity_id=activity_id, fields=sorted(changes))
    return activity


async def delete_activity(db: AsyncSession, user_id: int, activity_id: int) -> None:
    """Delete an activity with its completions; its todos become standalone."""
    activity = await get_activity(db, user_id, activity_id)
    await db.execute(delete(ActivityCompletion).where(ActivityCompletion.activity_id == activity_id))
    await db.execute(update(Todo).where(Todo.activity_id == activity_id).values(activity_id=None))
    await db.delete(activity)
    await db.commit()
    logger.info("activity_deleted", user_id=user_id, activity_id=activity_id)


async def complete_activity(
    db: AsyncSession, user_id: int, activity_id: int, notes: str | None = None
) -> tuple[ActivityCompletion, LadderProgress]:
    """Record an activity completion and credit its point value.

    Raises:
        NotFoundError: No activity has this id.
        ForbiddenError: The activity belongs to someone else.
    """
    activity = await db.get(Activity, activity_id)
    if activity is None:
        raise NotFoundError("Activity", activity_id)
    if activity.user_id != user_id:
        msg = "Activity does not belong to user"
        raise ForbiddenError(msg)

    progress = await get_or_create_progress(db, user_id)
    completion = ActivityCompletion(
        activity_id=activity_id,
        user_id=user_id,
        completed_at=utcnow(),
        points_earned=activity.point_value,
        notes=notes,
    )
    db.add(completion)
    unlocked = apply_activity_completion(progress, activity.point_value)
    progress = await save_progress(db, progress)
    logger.info(
        "activity_completed",
        user_id=user_id,
        activity_id=activity_id,
        points=activity.point_value,
        achievements=[a["id"] for a in unlocked],
    )
    return completion, progress


async def list_activity_completions(
    db: AsyncSession, user_id: int, activity_id: int | None = None
) -> list[ActivityCompletion]:
    stmt = select(ActivityCompletion).where(ActivityCompletion.user_id == user_id)
    if activity_id is not None:
        stmt = stmt.where(ActivityCompletion.activity_id == activity_id)
    result = await db.execute(stmt.order_by(ActivityCompletion.completed_at.desc(), ActivityCompletion.id.desc()))
    return list(result.scalars().all())


async def activity_progress(db: AsyncSession, user_id: int) -> dict[str, int]:
    """Ladder totals plus the number of activity completions in the last 7 days."""
    progress = await find_progress(db, user_id)
    recent = await db.scalar(
        select(func.count(ActivityCompletion.id)).where(
            ActivityCompletion.user_id == user_id,
            ActivityCompletion.completed_at >= utcnow() - RECENT_WINDOW,
        )
    )
    return {
        "total_points": progress.total_points if progress is not None else 0,
        "level": progress.current_level if progress is not None else 0,
        "recent_completions_count": recent or 0,
    }

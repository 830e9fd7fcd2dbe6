"""Habits and goals: per-user CRUD and ownership lookups.

Both carry a point value derived from their intensity; completions read
it from here, never from the request.
"""

from __future__ import annotations

from typing import TypeVar

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import Goal, Habit, utcnow
from habitladder.errors import ForbiddenError, NotFoundError, ValidationError
from habitladder.progress.rules import point_value_for
from habitladder.progress.store import get_or_create_progress

logger = structlog.get_logger()

T = TypeVar("T", Habit, Goal)


async def _list_active(db: AsyncSession, model: type[T], user_id: int) -> list[T]:
    result = await db.execute(
        select(model)
        .where(model.user_id == user_id, model.is_active.is_(True))
        .order_by(model.created_at.desc(), model.id.desc())
    )
    return list(result.scalars().all())


async def _create(
    db: AsyncSession,
    model: type[T],
    user_id: int,
    *,
    title: str,
    description: str | None,
    intensity: str,
    category: str,
    target_frequency: str,
) -> T:
    if not title.strip():
        raise ValidationError("title", "Title, intensity, and category are required")

    # first tracker of a new user also opens their ladder progress
    await get_or_create_progress(db, user_id)

    now = utcnow()
    record = model(
        user_id=user_id,
        title=title.strip(),
        description=description,
        intensity=intensity,
        category=category,
        target_frequency=target_frequency,
        point_value=point_value_for(intensity),
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.add(record)
    await db.commit()
    return record


async def _owned(db: AsyncSession, model: type[T], user_id: int, record_id: int) -> T:
    result = await db.execute(select(model).where(model.id == record_id, model.user_id == user_id))
    record = result.scalar_one_or_none()
    if record is None:
        raise NotFoundError(model.__name__, record_id)
    return record


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


async def list_habits(db: AsyncSession, user_id: int) -> list[Habit]:
    """Active habits of the user, newest first."""
    return await _list_active(db, Habit, user_id)


async def create_habit(db: AsyncSession, user_id: int, **fields: str | None) -> Habit:
    habit = await _create(db, Habit, user_id, **fields)
    logger.info("habit_created", user_id=user_id, habit_id=habit.id, point_value=habit.point_value)
    return habit


async def get_owned_habit(db: AsyncSession, user_id: int, habit_id: int) -> Habit:
    """The habit if it belongs to ``user_id``; another user's habit is simply not found."""
    return await _owned(db, Habit, user_id, habit_id)


async def deactivate_habit(db: AsyncSession, user_id: int, habit_id: int) -> None:
    habit = await get_owned_habit(db, user_id, habit_id)
    habit.is_active = False
    habit.updated_at = utcnow()
    await db.commit()
    logger.info("habit_deactivated", user_id=user_id, habit_id=habit_id)


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


async def list_goals(db: AsyncSession, user_id: int) -> list[Goal]:
    """Active goals of the user, newest first."""
    return await _list_active(db, Goal, user_id)


async def create_goal(db: AsyncSession, user_id: int, **fields: str | None) -> Goal:
    goal = await _create(db, Goal, user_id, **fields)
    logger.info("goal_created", user_id=user_id, goal_id=goal.id, point_value=goal.point_value)
    return goal


async def get_owned_goal(db: AsyncSession, user_id: int, goal_id: int) -> Goal:
    """The goal if it belongs to ``user_id``.

    Raises:
        NotFoundError: No goal has this id.
        ForbiddenError: The goal belongs to someone else.
    """
    goal = await db.get(Goal, goal_id)
    if goal is None:
        raise NotFoundError("Goal", goal_id)
    if goal.user_id != user_id:
        msg = "Not authorized to complete this goal"
        raise ForbiddenError(msg)
    return goal


async def deactivate_goal(db: AsyncSession, user_id: int, goal_id: int) -> None:
    goal = await _owned(db, Goal, user_id, goal_id)
    goal.is_active = False
    goal.updated_at = utcnow()
    await db.commit()
    logger.info("goal_deactivated", user_id=user_id, goal_id=goal_id)

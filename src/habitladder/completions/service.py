"""Habit and goal completion events and their effect on ladder progress."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import GoalCompletion, HabitCompletion, LadderProgress, Todo, as_utc, utcnow
from habitladder.errors import ConflictError, NotFoundError, ValidationError
from habitladder.progress.rules import (
    DEFAULT_GOAL_POINTS,
    apply_goal_completion,
    apply_habit_completion,
    revert_habit_completion,
)
from habitladder.progress.store import find_progress, get_or_create_progress, save_progress
from habitladder.tracking.service import get_owned_goal, get_owned_habit

logger = structlog.get_logger()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) of a UTC calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def consecutive_days(days: set[date], start: date) -> int:
    """Number of consecutive days in ``days`` ending the day before ``start``."""
    count = 0
    check = start - timedelta(days=1)
    while check in days:
        count += 1
        check -= timedelta(days=1)
    return count


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


async def habit_completion_on(db: AsyncSession, user_id: int, habit_id: int, day: date) -> HabitCompletion | None:
    start, end = day_bounds(day)
    result = await db.execute(
        select(HabitCompletion)
        .where(
            HabitCompletion.user_id == user_id,
            HabitCompletion.habit_id == habit_id,
            HabitCompletion.completed_at >= start,
            HabitCompletion.completed_at < end,
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def habit_streak(db: AsyncSession, user_id: int, habit_id: int, completed_at: datetime) -> int:
    """1 + the run of consecutive earlier days on which the habit was completed."""
    result = await db.execute(
        select(HabitCompletion.completed_at)
        .where(
            HabitCompletion.user_id == user_id,
            HabitCompletion.habit_id == habit_id,
            HabitCompletion.completed_at < day_bounds(completed_at.date())[0],
        )
        .order_by(HabitCompletion.completed_at.desc())
    )
    days = {as_utc(ts).date() for ts in result.scalars()}
    return 1 + consecutive_days(days, completed_at.date())


async def complete_habit(
    db: AsyncSession,
    user_id: int,
    habit_id: int,
    notes: str | None = None,
    completed_at: datetime | None = None,
) -> tuple[HabitCompletion, LadderProgress]:
    """Record a habit completion (once per UTC day) and credit the habit's points.

    Raises:
        NotFoundError: The habit does not exist, is deactivated or belongs to someone else.
        ValidationError: ``completed_at`` lies in the future.
        ConflictError: The habit was already completed that day.
    """
    habit = await get_owned_habit(db, user_id, habit_id)
    if not habit.is_active:
        raise NotFoundError("Habit", habit_id)
    points = habit.point_value
    now = utcnow()
    completed_at = as_utc(completed_at) if completed_at is not None else now
    if completed_at > now:
        raise ValidationError("completed_at", "Completion date cannot be in the future")

    if await habit_completion_on(db, user_id, habit_id, completed_at.date()) is not None:
        msg = "Habit already completed today"
        raise ConflictError(msg)

    streak = await habit_streak(db, user_id, habit_id, completed_at)
    progress = await get_or_create_progress(db, user_id)

    completion = HabitCompletion(
        habit_id=habit_id,
        user_id=user_id,
        completed_at=completed_at,
        points=points,
        streak=streak,
        notes=notes,
    )
    db.add(completion)
    unlocked = apply_habit_completion(progress, points, streak)
    progress = await save_progress(db, progress)

    logger.info(
        "habit_completed",
        user_id=user_id,
        habit_id=habit_id,
        points=points,
        streak=streak,
        achievements=[a["id"] for a in unlocked],
    )
    return completion, progress


async def undo_habit_completion(db: AsyncSession, user_id: int, habit_id: int) -> None:
    """Delete today's completion of ``habit_id`` and take its points back."""
    completion = await habit_completion_on(db, user_id, habit_id, utcnow().date())
    if completion is None:
        raise NotFoundError("Habit completion for today")

    progress = await find_progress(db, user_id)
    await db.delete(completion)
    if progress is not None:
        revert_habit_completion(progress, completion.points)
        await save_progress(db, progress)
    else:
        await db.commit()
    logger.info("habit_completion_undone", user_id=user_id, habit_id=habit_id, points=completion.points)


async def list_habit_completions(
    db: AsyncSession, user_id: int, start: datetime | None = None, end: datetime | None = None
) -> list[HabitCompletion]:
    stmt = select(HabitCompletion).where(HabitCompletion.user_id == user_id)
    if start is not None and end is not None:
        stmt = stmt.where(HabitCompletion.completed_at >= as_utc(start), HabitCompletion.completed_at <= as_utc(end))
    result = await db.execute(stmt.order_by(HabitCompletion.completed_at.desc(), HabitCompletion.id.desc()))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


async def _goal_completed_between(
    db: AsyncSession, user_id: int, start: datetime, end: datetime, goal_id: int | None = None
) -> bool:
    stmt = select(GoalCompletion.id).where(
        GoalCompletion.user_id == user_id,
        GoalCompletion.completed_at >= start,
        GoalCompletion.completed_at < end,
    )
    if goal_id is not None:
        stmt = stmt.where(GoalCompletion.goal_id == goal_id)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none() is not None


async def complete_goal(
    db: AsyncSession,
    user_id: int,
    goal_id: int,
    notes: str | None = None,
) -> tuple[GoalCompletion, LadderProgress]:
    """Record a goal completion (once per goal per UTC day) with the streak bonus.

    Completing a goal also reopens its completed repetitive todos.

    Raises:
        NotFoundError: No goal has this id, or it is deactivated.
        ForbiddenError: The goal belongs to someone else.
        ConflictError: The goal was already completed today.
    """
    goal = await get_owned_goal(db, user_id, goal_id)
    if not goal.is_active:
        raise NotFoundError("Goal", goal_id)
    base_points = goal.point_value or DEFAULT_GOAL_POINTS
    now = utcnow()
    today_start, today_end = day_bounds(now.date())

    if await _goal_completed_between(db, user_id, today_start, today_end, goal_id):
        msg = "Goal already completed today"
        raise ConflictError(msg)

    completed_yesterday = await _goal_completed_between(
        db, user_id, today_start - timedelta(days=1), today_start
    )
    progress = await get_or_create_progress(db, user_id)
    points, streak, unlocked = apply_goal_completion(progress, base_points, completed_yesterday)

    completion = GoalCompletion(
        goal_id=goal_id,
        user_id=user_id,
        completed_at=now,
        points=points,
        streak=streak,
        notes=notes,
    )
    db.add(completion)
    await db.execute(
        update(Todo)
        .where(
            Todo.user_id == user_id,
            Todo.goal_id == goal_id,
            Todo.is_completed.is_(True),
            Todo.is_repetitive.is_(True),
        )
        .values(is_completed=False, last_shown=now)
    )
    progress = await save_progress(db, progress)

    logger.info(
        "goal_completed",
        user_id=user_id,
        goal_id=goal_id,
        points=points,
        streak=streak,
        achievements=[a["id"] for a in unlocked],
    )
    return completion, progress


async def list_goal_completions(db: AsyncSession, user_id: int) -> list[GoalCompletion]:
    result = await db.execute(
        select(GoalCompletion)
        .where(GoalCompletion.user_id == user_id)
        .order_by(GoalCompletion.completed_at.desc(), GoalCompletion.id.desc())
    )
    return list(result.scalars().all())

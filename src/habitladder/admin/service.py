"""Administrator queries: user management, platform stats, analytics and cleanup.

Per-day series are bucketed in Python on UTC calendar days so the same
code runs on PostgreSQL and SQLite.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import date
from typing import Any

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import (
    Activity,
    ActivityCompletion,
    Application,
    Goal,
    GoalCompletion,
    Habit,
    HabitCompletion,
    LadderProgress,
    LadderSubmission,
    Todo,
    User,
)
from habitladder.errors import NotFoundError, ValidationError
from habitladder.progress.store import find_progress

logger = structlog.get_logger()

RECENT_USERS_LIMIT = 10
TOP_ACTIVITIES_LIMIT = 10
RECENT_COMPLETIONS_LIMIT = 20
SERIES_DAYS = 30

CLEANUP_COLLECTIONS = ("activities", "todos", "completions", "progress", "users")

# Rows owned by a user, children before parents.
_USER_OWNED = (
    (HabitCompletion, HabitCompletion.user_id),
    (GoalCompletion, GoalCompletion.user_id),
    (ActivityCompletion, ActivityCompletion.user_id),
    (Todo, Todo.user_id),
    (Habit, Habit.user_id),
    (Goal, Goal.user_id),
    (Activity, Activity.user_id),
    (LadderSubmission, LadderSubmission.user_id),
    (Application, Application.user_id),
    (LadderProgress, LadderProgress.user_id),
)


async def _count(db: AsyncSession, column: Any) -> int:
    return await db.scalar(select(func.count(column))) or 0


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


async def list_users(db: AsyncSession) -> list[User]:
    """Every account, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def user_detail(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """One user with their activities, todos, activity completions and progress."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)

    activities = (await db.execute(select(Activity).where(Activity.user_id == user_id))).scalars().all()
    todos = (await db.execute(select(Todo).where(Todo.user_id == user_id))).scalars().all()
    completions = (
        (
            await db.execute(
                select(ActivityCompletion)
                .where(ActivityCompletion.user_id == user_id)
                .order_by(ActivityCompletion.completed_at.desc())
            )
        )
        .scalars()
        .all()
    )
    progress = await find_progress(db, user_id)

    return {
        "user": user,
        "stats": {
            "total_activities": len(activities),
            "total_todos": len(todos),
            "total_completions": len(completions),
            "total_points": progress.total_points if progress is not None else 0,
            "current_level": progress.current_level if progress is not None else 0,
        },
        "activities": list(activities),
        "todos": list(todos),
        "completions": list(completions),
        "progress": progress,
    }


async def delete_user(db: AsyncSession, user_id: int, admin_emails: list[str]) -> None:
    """Delete a user and every row they own. Administrators cannot be deleted."""
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    if user.email in admin_emails:
        raise ValidationError("user_id", "Cannot delete admin user")

    for model, owner in _USER_OWNED:
        await db.execute(delete(model).where(owner == user_id))
    await db.delete(user)
    await db.commit()
    logger.info("user_deleted", user_id=user_id)


# ---------------------------------------------------------------------------
# Stats & analytics
# ---------------------------------------------------------------------------


async def admin_stats(db: AsyncSession) -> dict[str, Any]:
    """Platform totals, newest users, most-completed activities and latest completions."""
    completion_count = func.count(ActivityCompletion.id).label("completion_count")
    top = await db.execute(
        select(Activity, completion_count)
        .outerjoin(ActivityCompletion, ActivityCompletion.activity_id == Activity.id)
        .group_by(Activity.id)
        .order_by(completion_count.desc(), Activity.id.asc())
        .limit(TOP_ACTIVITIES_LIMIT)
    )
    recent_users = await db.execute(
        select(User).order_by(User.created_at.desc(), User.id.desc()).limit(RECENT_USERS_LIMIT)
    )
    recent_completions = await db.execute(
        select(ActivityCompletion)
        .order_by(ActivityCompletion.completed_at.desc(), ActivityCompletion.id.desc())
        .limit(RECENT_COMPLETIONS_LIMIT)
    )

    return {
        "stats": {
            "total_users": await _count(db, User.id),
            "total_activities": await _count(db, Activity.id),
            "total_todos": await _count(db, Todo.id),
            "total_completions": await _count(db, ActivityCompletion.id),
        },
        "recent_users": list(recent_users.scalars().all()),
        "top_activities": [
            {
                "id": activity.id,
                "user_id": activity.user_id,
                "title": activity.title,
                "category": activity.category,
                "completion_count": count,
            }
            for activity, count in top.all()
        ],
        "recent_completions": list(recent_completions.scalars().all()),
    }


def _daily(stamps: list[Any]) -> list[date]:
    """The last ``SERIES_DAYS`` distinct days present in ``stamps``, oldest first."""
    return sorted({ts.date() for ts in stamps})[-SERIES_DAYS:]


async def analytics(db: AsyncSession) -> dict[str, Any]:
    """Registration growth, completion trends, category mix and per-user engagement."""
    created = (await db.execute(select(User.created_at))).scalars().all()
    signups = Counter(ts.date() for ts in created)
    user_growth = [{"date": day.isoformat(), "count": signups[day]} for day in _daily(created)]

    completion_rows = (
        await db.execute(
            select(ActivityCompletion.user_id, ActivityCompletion.completed_at, ActivityCompletion.points_earned)
        )
    ).all()
    per_day: dict[date, list[int]] = defaultdict(list)
    points_by_user: Counter[int] = Counter()
    completions_by_user: Counter[int] = Counter()
    for user_id, completed_at, points in completion_rows:
        per_day[completed_at.date()].append(points)
        points_by_user[user_id] += points
        completions_by_user[user_id] += 1
    completion_trends = [
        {"date": day.isoformat(), "completions": len(per_day[day]), "total_points": sum(per_day[day])}
        for day in _daily([row.completed_at for row in completion_rows])
    ]

    category_rows = await db.execute(
        select(Activity.category, func.count(Activity.id), func.avg(Activity.point_value))
        .group_by(Activity.category)
        .order_by(func.count(Activity.id).desc(), Activity.category.asc())
    )
    category_stats = [
        {"category": category, "count": count, "avg_point_value": float(avg or 0)}
        for category, count, avg in category_rows.all()
    ]

    activities_by_user = Counter(
        dict((await db.execute(select(Activity.user_id, func.count(Activity.id)).group_by(Activity.user_id))).all())
    )
    todos_by_user = Counter(
        dict((await db.execute(select(Todo.user_id, func.count(Todo.id)).group_by(Todo.user_id))).all())
    )
    users = (await db.execute(select(User))).scalars().all()
    user_engagement = sorted(
        (
            {
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "created_at": user.created_at,
                "completion_count": completions_by_user[user.id],
                "activity_count": activities_by_user[user.id],
                "todo_count": todos_by_user[user.id],
                "total_points": points_by_user[user.id],
            }
            for user in users
        ),
        key=lambda row: (-row["total_points"], row["id"]),
    )

    return {
        "user_growth": user_growth,
        "completion_trends": completion_trends,
        "category_stats": category_stats,
        "user_engagement": user_engagement,
    }


# ---------------------------------------------------------------------------
# Cleanup
# ---------------------------------------------------------------------------


async def cleanup(db: AsyncSession, collections: list[str], admin_emails: list[str]) -> dict[str, int]:
    """Bulk-delete whole collections. Unknown names are skipped; admins are never deleted.

    Returns:
        Deleted row count per cleaned collection.
    """
    if not collections:
        raise ValidationError("collections", "No collections specified")

    targets = {
        "activities": delete(Activity),
        "todos": delete(Todo),
        "completions": delete(ActivityCompletion),
        "progress": delete(LadderProgress),
        "users": delete(User).where(User.email.not_in(admin_emails)),
    }
    results: dict[str, int] = {}
    for name in collections:
        if name not in targets or name in results:
            continue
        if name == "activities":
            # activity completions cannot outlive their activity
            await db.execute(delete(ActivityCompletion))
        result = await db.execute(targets[name])
        results[name] = result.rowcount
    await db.commit()
    logger.warning("database_cleanup", results=results)
    return results

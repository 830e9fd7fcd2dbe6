"""Todos: standalone tasks and tasks attached to an activity or a goal."""

from __future__ import annotations

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import Activity, Goal, Todo, utcnow
from habitladder.errors import NotFoundError, ValidationError

logger = structlog.get_logger()


def _require_title(title: str | None) -> str:
    if not title or not title.strip():
        raise ValidationError("title", "Title is required")
    return title.strip()


async def _check_owner(db: AsyncSession, model: type[Activity] | type[Goal], record_id: int, user_id: int) -> None:
    record = await db.get(model, record_id)
    if record is None or record.user_id != user_id:
        raise NotFoundError(model.__name__, record_id)


async def list_todos(db: AsyncSession, user_id: int) -> list[Todo]:
    """Every todo of the user, archived ones included, newest first."""
    result = await db.execute(
        select(Todo).where(Todo.user_id == user_id).order_by(Todo.created_at.desc(), Todo.id.desc())
    )
    return list(result.scalars().all())


async def get_todo(db: AsyncSession, user_id: int, todo_id: int) -> Todo:
    """The todo if it belongs to ``user_id``; anyone else's todo is not found."""
    todo = await db.get(Todo, todo_id)
    if todo is None or todo.user_id != user_id:
        raise NotFoundError("Todo", todo_id)
    return todo


async def create_todo(
    db: AsyncSession,
    user_id: int,
    *,
    title: str | None,
    description: str | None = None,
    activity_id: int | None = None,
    goal_id: int | None = None,
    is_repetitive: bool = False,
) -> Todo:
    """Create a todo. A linked activity or goal must belong to the same user."""
    title = _require_title(title)
    if activity_id is not None:
        await _check_owner(db, Activity, activity_id, user_id)
    if goal_id is not None:
        await _check_owner(db, Goal, goal_id, user_id)

    now = utcnow()
    todo = Todo(
        user_id=user_id,
        title=title,
        description=description or "",
        activity_id=activity_id,
        goal_id=goal_id,
        is_completed=False,
        is_archived=False,
        is_repetitive=is_repetitive,
        last_shown=now,
        created_at=now,
    )
    db.add(todo)
    await db.commit()
    logger.info("todo_created", user_id=user_id, todo_id=todo.id, repetitive=is_repetitive)
    return todo


async def update_todo(
    db: AsyncSession, user_id: int, todo_id: int, *, title: str | None, description: str | None
) -> Todo:
    title = _require_title(title)
    todo = await get_todo(db, user_id, todo_id)
    todo.title = title
    todo.description = description
    await db.commit()
    return todo


async def set_todo_status(
    db: AsyncSession,
    user_id: int,
    todo_id: int,
    *,
    is_completed: bool | None = None,
    is_archived: bool | None = None,
) -> Todo:
    """Mark a todo done/undone and/or archive it. At least one flag is required."""
    if is_completed is None and is_archived is None:
        raise ValidationError("is_completed", "is_completed field is required")

    todo = await get_todo(db, user_id, todo_id)
    if is_completed is not None:
        todo.is_completed = is_completed
    if is_archived is not None:
        todo.is_archived = is_archived
        todo.archived_at = utcnow() if is_archived else None
    await db.commit()
    logger.info(
        "todo_status_changed",
        user_id=user_id,
        todo_id=todo_id,
        completed=todo.is_completed,
        archived=todo.is_archived,
    )
    return todo


async def delete_todo(db: AsyncSession, user_id: int, todo_id: int) -> None:
    todo = await get_todo(db, user_id, todo_id)
    await db.delete(todo)
    await db.commit()
    logger.info("todo_deleted", user_id=user_id, todo_id=todo_id)


async def list_archived_todos(db: AsyncSession, user_id: int, activity_id: int | None = None) -> list[Todo]:
    """Archived todos, most recently archived first, optionally for one activity."""
    stmt = select(Todo).where(Todo.user_id == user_id, Todo.is_archived.is_(True))
    if activity_id is not None:
        stmt = stmt.where(Todo.activity_id == activity_id)
    result = await db.execute(stmt.order_by(Todo.archived_at.desc(), Todo.id.desc()))
    return list(result.scalars().all())


async def restore_todo(db: AsyncSession, user_id: int, todo_id: int) -> Todo:
    result = await db.execute(
        select(Todo).where(Todo.id == todo_id, Todo.user_id == user_id, Todo.is_archived.is_(True))
    )
    todo = result.scalar_one_or_none()
    if todo is None:
        raise NotFoundError("Archived todo", todo_id)
    todo.is_archived = False
    todo.archived_at = None
    await db.commit()
    logger.info("todo_restored", user_id=user_id, todo_id=todo_id)
    return todo

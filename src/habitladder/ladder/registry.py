"""Ladder question registry.

Several questions may exist for a week; the newest active one is the
current question. Older ones are ignored, never deleted implicitly.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.db.models import WEEKS, LadderQuestion, utcnow
from habitladder.errors import NotFoundError, ValidationError

logger = structlog.get_logger()

_UPDATABLE = frozenset({"week", "title", "description", "fields", "is_active"})
_NULLABLE = frozenset({"description"})


def validate_week(week: str | None) -> str:
    """Return ``week`` if it is a recognized token; raise ValidationError otherwise."""
    if not week:
        raise ValidationError("week", "Week parameter is required")
    if week not in WEEKS:
        raise ValidationError("week", "Invalid week value")
    return week


async def current_question(db: AsyncSession, week: str | None) -> LadderQuestion | None:
    """Newest active question for ``week`` (ties broken by highest id)."""
    week = validate_week(week)
    result = await db.execute(
        select(LadderQuestion)
        .where(LadderQuestion.week == week, LadderQuestion.is_active.is_(True))
        .order_by(LadderQuestion.created_at.desc(), LadderQuestion.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_questions(db: AsyncSession) -> list[LadderQuestion]:
    result = await db.execute(
        select(LadderQuestion).order_by(
            LadderQuestion.week.asc(), LadderQuestion.created_at.desc(), LadderQuestion.id.desc()
        )
    )
    return list(result.scalars().all())


async def get_question(db: AsyncSession, question_id: int) -> LadderQuestion:
    question = await db.get(LadderQuestion, question_id)
    if question is None:
        raise NotFoundError("Question", question_id)
    return question


async def _conflicting_field_ids(
    db: AsyncSession, week: str, fields: list[dict[str, Any]], exclude_id: int | None = None
) -> list[str]:
    """Field ids of ``fields`` already used by another active question of ``week``."""
    stmt = select(LadderQuestion).where(LadderQuestion.week == week, LadderQuestion.is_active.is_(True))
    if exclude_id is not None:
        stmt = stmt.where(LadderQuestion.id != exclude_id)
    result = await db.execute(stmt)
    taken = {f.get("id") for q in result.scalars() for f in (q.fields or [])}
    return [f["id"] for f in fields if f["id"] in taken]


def _check_fields(fields: list[dict[str, Any]]) -> None:
    seen: set[str] = set()
    for field in fields:
        if not field.get("id") or not field.get("type") or not field.get("label"):
            raise ValidationError("fields", "Each field must have id, type, and label")
        if field["id"] in seen:
            raise ValidationError("fields", f"Duplicate field ID: {field['id']}")
        seen.add(field["id"])


def _conflict_message(ids: list[str]) -> str:
    return (
        f"Field ID conflicts detected: {', '.join(ids)}. "
        "Field IDs must be unique across all questions in the same week."
    )


async def create_question(
    db: AsyncSession,
    *,
    week: str,
    title: str,
    description: str | None,
    fields: list[dict[str, Any]],
    created_by: str,
) -> LadderQuestion:
    """Create an active question for ``week``."""
    week = validate_week(week)
    if not title or not title.strip():
        raise ValidationError("title", "Week, title, and fields are required")
    _check_fields(fields)

    conflicts = await _conflicting_field_ids(db, week, fields)
    if conflicts:
        raise ValidationError("fields", _conflict_message(conflicts))

    now = utcnow()
    question = LadderQuestion(
        week=week,
        title=title.strip(),
        description=description,
        fields=fields,
        is_active=True,
        created_at=now,
        updated_at=now,
        created_by=created_by,
    )
    db.add(question)
    await db.commit()
    logger.info("question_created", question_id=question.id, week=week, created_by=created_by)
    return question


async def update_question(db: AsyncSession, question_id: int, changes: dict[str, Any]) -> LadderQuestion:
    """Apply a partial update. Only known attributes are written."""
    question = await get_question(db, question_id)
    changes = {k: v for k, v in changes.items() if k in _UPDATABLE}
    for key, value in changes.items():
        if value is None and key not in _NULLABLE:
            raise ValidationError(key, f"{key} cannot be null")

    if "week" in changes:
        changes["week"] = validate_week(changes["week"])
    if "fields" in changes:
        _check_fields(changes["fields"])
        week = changes.get("week", question.week)
        conflicts = await _conflicting_field_ids(db, week, changes["fields"], exclude_id=question.id)
        if conflicts:
            raise ValidationError("fields", _conflict_message(conflicts))

    for key, value in changes.items():
        setattr(question, key, value)
    question.updated_at = utcnow()
    await db.commit()
    logger.info("question_updated", question_id=question.id, fields=sorted(changes))
    return question


async def delete_question(db: AsyncSession, question_id: int) -> None:
    question = await get_question(db, question_id)
    await db.delete(question)
    await db.commit()
    logger.info("question_deleted", question_id=question_id)

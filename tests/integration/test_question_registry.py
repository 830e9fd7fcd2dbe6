"""Integration tests for the ladder question registry."""

from __future__ import annotations

from datetime import timedelta

import pytest

from habitladder.db.models import LadderQuestion, utcnow
from habitladder.errors import NotFoundError, ValidationError
from habitladder.ladder.registry import (
    create_question,
    current_question,
    delete_question,
    get_question,
    update_question,
)


def _field(field_id: str) -> dict:
    return {"id": field_id, "type": "text", "label": field_id.title(), "required": True}


async def _insert(db, week: str, title: str, created_at, *, is_active: bool = True) -> LadderQuestion:
    question = LadderQuestion(
        week=week,
        title=title,
        fields=[],
        is_active=is_active,
        created_at=created_at,
        updated_at=created_at,
        created_by="admin@example.com",
    )
    db.add(question)
    await db.commit()
    return question


class TestCurrentQuestion:
    @pytest.mark.asyncio
    async def test_newest_active_question_wins(self, db_session):
        now = utcnow()
        await _insert(db_session, "week1", "A", now - timedelta(days=2))
        await _insert(db_session, "week1", "B", now - timedelta(days=1))
        await _insert(db_session, "week2", "other week", now)

        question = await current_question(db_session, "week1")
        assert question is not None
        assert question.title == "B"

    @pytest.mark.asyncio
    async def test_inactive_questions_ignored(self, db_session):
        now = utcnow()
        await _insert(db_session, "week3", "old", now - timedelta(days=3))
        await _insert(db_session, "week3", "retired", now, is_active=False)

        question = await current_question(db_session, "week3")
        assert question.title == "old"

    @pytest.mark.asyncio
    async def test_no_question_is_none(self, db_session):
        assert await current_question(db_session, "complete") is None

    @pytest.mark.asyncio
    async def test_bogus_week_rejected_before_lookup(self, db_session):
        with pytest.raises(ValidationError, match="Invalid week value"):
            await current_question(db_session, "bogus")

    @pytest.mark.asyncio
    async def test_missing_week_rejected(self, db_session):
        with pytest.raises(ValidationError, match="Week parameter is required"):
            await current_question(db_session, None)


class TestQuestionAdmin:
    @pytest.mark.asyncio
    async def test_create_is_active_and_current(self, db_session):
        question = await create_question(
            db_session,
            week="week2",
            title="  Reflect  ",
            description=None,
            fields=[_field("goal")],
            created_by="admin@example.com",
        )
        assert question.is_active is True
        assert question.title == "Reflect"
        assert (await current_question(db_session, "week2")).id == question.id

    @pytest.mark.asyncio
    async def test_field_ids_unique_across_active_questions_of_week(self, db_session):
        await create_question(
            db_session, week="week1", title="One", description=None, fields=[_field("goal")], created_by="a"
        )
        with pytest.raises(ValidationError, match="Field ID conflicts detected: goal"):
            await create_question(
                db_session, week="week1", title="Two", description=None, fields=[_field("goal")], created_by="a"
            )
        # another week may reuse it
        await create_question(
            db_session, week="week2", title="Three", description=None, fields=[_field("goal")], created_by="a"
        )

    @pytest.mark.asyncio
    async def test_duplicate_field_id_within_question(self, db_session):
        with pytest.raises(ValidationError, match="Duplicate field ID: x"):
            await create_question(
                db_session,
                week="week1",
                title="Dup",
                description=None,
                fields=[_field("x"), _field("x")],
                created_by="a",
            )

    @pytest.mark.asyncio
    async def test_update_ignores_unknown_keys(self, db_session):
        question = await create_question(
            db_session, week="week4", title="Old", description=None, fields=[_field("a")], created_by="a"
        )
        updated = await update_question(
            db_session, question.id, {"title": "New", "created_by": "mallory", "is_active": False}
        )
        assert updated.title == "New"
        assert updated.is_active is False
        assert updated.created_by == "a"

    @pytest.mark.asyncio
    async def test_update_own_fields_is_not_a_conflict(self, db_session):
        question = await create_question(
            db_session, week="week4", title="Q", description=None, fields=[_field("a")], created_by="a"
        )
        updated = await update_question(db_session, question.id, {"fields": [_field("a"), _field("b")]})
        assert [f["id"] for f in updated.fields] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_update_null_on_required_key_rejected(self, db_session):
        question = await create_question(
            db_session, week="week2", title="Q", description="d", fields=[_field("a")], created_by="a"
        )
        for key in ("title", "is_active", "fields", "week"):
            with pytest.raises(ValidationError) as exc_info:
                await update_question(db_session, question.id, {key: None})
            assert exc_info.value.field == key

        cleared = await update_question(db_session, question.id, {"description": None})
        assert cleared.description is None
        assert cleared.title == "Q"

    @pytest.mark.asyncio
    async def test_delete_then_missing(self, db_session):
        question = await create_question(
            db_session, week="week1", title="Q", description=None, fields=[_field("a")], created_by="a"
        )
        await delete_question(db_session, question.id)
        with pytest.raises(NotFoundError):
            await get_question(db_session, question.id)

"""Ladder submissions: one answer set per user per week."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.session import Identity
from habitladder.db.models import SUBMISSION_STATUSES, LadderQuestion, LadderSubmission, utcnow
from habitladder.errors import ConflictError, NotFoundError, ValidationError
from habitladder.ladder.registry import validate_week

logger = structlog.get_logger()

REVIEW_STATUSES = frozenset({"reviewed", "approved", "rejected"})


async def list_user_submissions(db: AsyncSession, user_id: int, week: str | None = None) -> list[LadderSubmission]:
    stmt = select(LadderSubmission).where(LadderSubmission.user_id == user_id)
    if week:
        stmt = stmt.where(LadderSubmission.week == validate_week(week))
    result = await db.execute(stmt.order_by(LadderSubmission.created_at.desc(), LadderSubmission.id.desc()))
    return list(result.scalars().all())


async def save_submission(
    db: AsyncSession,
    identity: Identity,
    *,
    week: str,
    question_id: int,
    responses: list[dict[str, Any]],
    status: str = "draft",
) -> tuple[LadderSubmission, bool]:
    """Create or update the caller's submission for ``week``.

    Returns:
        Tuple of (submission, created).
    """
    week = validate_week(week)
    if status not in ("draft", "submitted"):
        raise ValidationError("status", "Invalid status")

    question = await db.get(LadderQuestion, question_id)
    if question is None or not question.is_active:
        raise NotFoundError("Question", question_id)
    if question.week != week:
        raise ValidationError("week", "Question week does not match submission week")

    result = await db.execute(
        select(LadderSubmission).where(LadderSubmission.user_id == identity.id, LadderSubmission.week == week)
    )
    submission = result.scalar_one_or_none()
    now = utcnow()
    created = submission is None

    if submission is None:
        submission = LadderSubmission(user_id=identity.id, week=week, created_at=now)
        db.add(submission)
    elif submission.status == "submitted" and status == "submitted":
        msg = "Submission already submitted and cannot be modified"
        raise ConflictError(msg)

    submission.user_email = identity.email
    submission.user_name = identity.name
    submission.question_id = question_id
    submission.responses = responses
    submission.status = status
    submission.updated_at = now
    if status == "submitted" and submission.submitted_at is None:
        submission.submitted_at = now

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        msg = "A submission for this week already exists"
        raise ConflictError(msg) from e

    logger.info(
        "submission_saved", submission_id=submission.id, user_id=identity.id, week=week, status=status, created=created
    )
    return submission, created


async def list_submissions(
    db: AsyncSession, week: str | None = None, status: str | None = None
) -> list[LadderSubmission]:
    """All submissions, newest first, optionally filtered (admin)."""
    stmt = select(LadderSubmission)
    if week:
        stmt = stmt.where(LadderSubmission.week == validate_week(week))
    if status:
        if status not in SUBMISSION_STATUSES:
            raise ValidationError("status", "Invalid status")
        stmt = stmt.where(LadderSubmission.status == status)
    result = await db.execute(stmt.order_by(LadderSubmission.created_at.desc(), LadderSubmission.id.desc()))
    return list(result.scalars().all())


async def get_submission(db: AsyncSession, submission_id: int) -> LadderSubmission:
    submission = await db.get(LadderSubmission, submission_id)
    if submission is None:
        raise NotFoundError("Submission", submission_id)
    return submission


async def review_submission(
    db: AsyncSession,
    submission_id: int,
    reviewer: Identity,
    *,
    status: str | None = None,
    review_comments: str | None = None,
    score: int | None = None,
) -> LadderSubmission:
    """Record an admin review. Review statuses stamp reviewer and time."""
    if status is not None and status not in SUBMISSION_STATUSES:
        raise ValidationError("status", "Invalid status")
    if score is not None and not 0 <= score <= 100:
        raise ValidationError("score", "Score must be between 0 and 100")

    submission = await get_submission(db, submission_id)
    now = utcnow()
    if status is not None:
        submission.status = status
        if status in REVIEW_STATUSES:
            submission.reviewed_at = now
            submission.reviewed_by = reviewer.email
    if review_comments is not None:
        submission.review_comments = review_comments
    if score is not None:
        submission.score = score
    submission.updated_at = now
    await db.commit()
    logger.info("submission_reviewed", submission_id=submission_id, status=submission.status, reviewer=reviewer.email)
    return submission

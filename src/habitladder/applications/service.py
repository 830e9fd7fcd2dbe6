"""Program applications: applicant operations and admin review."""

from __future__ import annotations

from datetime import timedelta

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.session import Identity
from habitladder.db.models import APPLICATION_STATUSES, Application, utcnow
from habitladder.errors import ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger()

MIN_WHY_JOIN_LENGTH = 50
RECENT_WINDOW = timedelta(days=7)


def validate_submission(phone: str | None, why_join: str | None) -> None:
    """A submitted application needs a phone number and a 50+ character motivation."""
    if not phone or not phone.strip():
        raise ValidationError("phone", "Phone number is required")
    if not why_join or not why_join.strip():
        raise ValidationError("why_join", "Please explain why you want to join")
    if len(why_join) < MIN_WHY_JOIN_LENGTH:
        raise ValidationError("why_join", f"Please provide at least {MIN_WHY_JOIN_LENGTH} characters")


async def get_user_application(db: AsyncSession, user_id: int) -> Application | None:
    result = await db.execute(select(Application).where(Application.user_id == user_id))
    return result.scalar_one_or_none()


async def create_application(
    db: AsyncSession,
    identity: Identity,
    *,
    phone: str | None,
    why_join: str | None,
    status: str = "draft",
) -> Application:
    """Create the caller's application. Each user may have only one."""
    if status == "submitted":
        validate_submission(phone, why_join)

    if await get_user_application(db, identity.id) is not None:
        msg = "Application already exists"
        raise ConflictError(msg)

    now = utcnow()
    application = Application(
        user_id=identity.id,
        name=identity.name,
        email=identity.email,
        phone=phone or "",
        why_join=why_join or "",
        status=status,
        submitted_at=now if status == "submitted" else None,
        created_at=now,
        updated_at=now,
    )
    db.add(application)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        msg = "Application already exists"
        raise ConflictError(msg) from e

    logger.info("application_created", application_id=application.id, user_id=identity.id, status=status)
    return application


async def update_application(
    db: AsyncSession,
    identity: Identity,
    *,
    phone: str | None,
    why_join: str | None,
    status: str,
) -> Application:
    """Update the caller's own application."""
    if status == "submitted":
        validate_submission(phone, why_join)

    application = await get_user_application(db, identity.id)
    if application is None:
        raise NotFoundError("Application")

    now = utcnow()
    application.phone = phone or ""
    application.why_join = why_join or ""
    application.status = status
    application.updated_at = now
    if status == "submitted":
        application.submitted_at = now
    await db.commit()
    logger.info("application_updated", application_id=application.id, status=status)
    return application


async def list_applications(db: AsyncSession) -> list[Application]:
    """Every application, newest first (admin)."""
    result = await db.execute(select(Application).order_by(Application.created_at.desc(), Application.id.desc()))
    return list(result.scalars().all())


async def set_application_status(db: AsyncSession, application_id: int, status: str) -> Application:
    """Admin status change. ``reviewed`` stamps the review time."""
    if status not in APPLICATION_STATUSES:
        raise ValidationError("status", "Invalid status")

    application = await db.get(Application, application_id)
    if application is None:
        raise NotFoundError("Application", application_id)

    now = utcnow()
    application.status = status
    application.updated_at = now
    if status == "reviewed":
        application.reviewed_at = now
    await db.commit()
    logger.info("application_status_changed", application_id=application_id, status=status)
    return application


async def application_analytics(db: AsyncSession) -> dict[str, object]:
    """Totals for the admin dashboard: overall, per status, and created in the last 7 days."""
    total = await db.scalar(select(func.count(Application.id)))
    rows = await db.execute(select(Application.status, func.count(Application.id)).group_by(Application.status))
    by_status = dict.fromkeys(APPLICATION_STATUSES, 0)
    for status, count in rows.all():
        if status in by_status:
            by_status[status] = count
    recent = await db.scalar(
        select(func.count(Application.id)).where(Application.created_at >= utcnow() - RECENT_WINDOW)
    )
    return {"total": total or 0, "by_status": by_status, "recent_applications": recent or 0}

"""Applicant endpoints: /api/applications."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.applications.schemas import ApplicationEnvelope, ApplicationRequest, ApplicationResponse
from habitladder.applications.service import create_application, get_user_application, update_application
from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.database import get_session

router = APIRouter(prefix="/api/applications", tags=["Applications"])


@router.get("", response_model=ApplicationEnvelope)
async def get_my_application(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ApplicationEnvelope:
    """The caller's application, or null if they have not applied."""
    application = await get_user_application(db, identity.id)
    return ApplicationEnvelope(
        application=ApplicationResponse.model_validate(application) if application is not None else None
    )


@router.post("", response_model=ApplicationEnvelope, status_code=201)
async def apply(
    body: ApplicationRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ApplicationEnvelope:
    application = await create_application(
        db, identity, phone=body.phone, why_join=body.why_join, status=body.status
    )
    return ApplicationEnvelope(application=ApplicationResponse.model_validate(application))


@router.put("", response_model=ApplicationEnvelope)
async def update_my_application(
    body: ApplicationRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ApplicationEnvelope:
    application = await update_application(
        db, identity, phone=body.phone, why_join=body.why_join, status=body.status
    )
    return ApplicationEnvelope(application=ApplicationResponse.model_validate(application))

"""Administrator endpoints: /api/admin/*.

Every route depends on :func:`get_admin_identity`; anyone else gets 401.
"""

from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.admin.schemas import (
    AdminStatsResponse,
    AnalyticsResponse,
    CleanupRequest,
    CleanupResponse,
    UserDetailResponse,
    UserListResponse,
    UserResponse,
)
from habitladder.admin.service import admin_stats, analytics, cleanup, delete_user, list_users, user_detail
from habitladder.applications.schemas import (
    ApplicationAnalyticsResponse,
    ApplicationEnvelope,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatusRequest,
)
from habitladder.applications.service import application_analytics, list_applications, set_application_status
from habitladder.auth.dependencies import get_admin_identity, get_app_settings
from habitladder.auth.session import Identity
from habitladder.config import Settings
from habitladder.database import get_session
from habitladder.ladder.registry import (
    create_question,
    delete_question,
    get_question,
    list_questions,
    update_question,
)
from habitladder.ladder.schemas import (
    QuestionCreateRequest,
    QuestionListResponse,
    QuestionMutationResponse,
    QuestionResponse,
    QuestionUpdateRequest,
    SubmissionEnvelope,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionReviewRequest,
)
from habitladder.ladder.submissions import get_submission, list_submissions, review_submission

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


@router.get("/applications", response_model=ApplicationListResponse)
async def get_applications(
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> ApplicationListResponse:
    """All applications, newest first."""
    applications = await list_applications(db)
    return ApplicationListResponse(applications=[ApplicationResponse.model_validate(a) for a in applications])


@router.get("/applications/analytics", response_model=ApplicationAnalyticsResponse)
async def get_application_analytics(
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> ApplicationAnalyticsResponse:
    return ApplicationAnalyticsResponse(**await application_analytics(db))


@router.put("/applications/{application_id}", response_model=ApplicationEnvelope)
async def change_application_status(
    application_id: int,
    body: ApplicationStatusRequest,
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> ApplicationEnvelope:
    application = await set_application_status(db, application_id, body.status)
    return ApplicationEnvelope(application=ApplicationResponse.model_validate(application))


# ---------------------------------------------------------------------------
# Ladder questions
# ---------------------------------------------------------------------------


@router.get("/ladder/questions", response_model=QuestionListResponse)
async def get_all_questions(
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> QuestionListResponse:
    questions = await list_questions(db)
    return QuestionListResponse(questions=[QuestionResponse.model_validate(q) for q in questions])


@router.post("/ladder/questions", response_model=QuestionMutationResponse, status_code=201)
async def add_question(
    body: QuestionCreateRequest,
    admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> QuestionMutationResponse:
    question = await create_question(
        db,
        week=body.week,
        title=body.title,
        description=body.description,
        fields=[f.model_dump() for f in body.fields],
        created_by=admin.email,
    )
    return QuestionMutationResponse(
        message="Ladder question created successfully",
        question=QuestionResponse.model_validate(question),
    )


@router.get("/ladder/questions/{question_id}", response_model=QuestionResponse)
async def get_one_question(
    question_id: int,
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> QuestionResponse:
    return QuestionResponse.model_validate(await get_question(db, question_id))


@router.put("/ladder/questions/{question_id}", response_model=QuestionMutationResponse)
async def edit_question(
    question_id: int,
    body: QuestionUpdateRequest,
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> QuestionMutationResponse:
    changes = body.model_dump(exclude_unset=True)
    if body.fields is not None:
        changes["fields"] = [f.model_dump() for f in body.fields]
    question = await update_question(db, question_id, changes)
    return QuestionMutationResponse(
        message="Question updated successfully",
        question=QuestionResponse.model_validate(question),
    )


@router.delete("/ladder/questions/{question_id}")
async def remove_question(
    question_id: int,
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    await delete_question(db, question_id)
    return {"message": "Question deleted successfully"}


# ---------------------------------------------------------------------------
# Ladder submissions
# ---------------------------------------------------------------------------


@router.get("/ladder/submissions", response_model=SubmissionListResponse)
async def get_all_submissions(
    week: str | None = Query(None),
    status: str | None = Query(None),
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> SubmissionListResponse:
    submissions = await list_submissions(db, week=week, status=status)
    return SubmissionListResponse(submissions=[SubmissionResponse.model_validate(s) for s in submissions])


@router.get("/ladder/submissions/{submission_id}", response_model=SubmissionEnvelope)
async def get_one_submission(
    submission_id: int,
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> SubmissionEnvelope:
    return SubmissionEnvelope(submission=SubmissionResponse.model_validate(await get_submission(db, submission_id)))


@router.put("/ladder/submissions/{submission_id}", response_model=SubmissionEnvelope)
async def review(
    submission_id: int,
    body: SubmissionReviewRequest,
    admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> SubmissionEnvelope:
    submission = await review_submission(
        db,
        submission_id,
        admin,
        status=body.status,
        review_comments=body.review_comments,
        score=body.score,
    )
    return SubmissionEnvelope(submission=SubmissionResponse.model_validate(submission))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=UserListResponse)
async def get_users(
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> UserListResponse:
    users = await list_users(db)
    return UserListResponse(users=[UserResponse.model_validate(u) for u in users])


@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user_detail(
    user_id: int,
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> UserDetailResponse:
    return UserDetailResponse.model_validate(await user_detail(db, user_id), from_attributes=True)


@router.delete("/users/{user_id}")
async def remove_user(
    user_id: int,
    _admin: Identity = Depends(get_admin_identity),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    """Delete a user and all of their data."""
    await delete_user(db, user_id, settings.admin_emails)
    return {"message": "User and all associated data deleted successfully"}


# ---------------------------------------------------------------------------
# Stats, analytics & cleanup
# ---------------------------------------------------------------------------


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> AdminStatsResponse:
    return AdminStatsResponse.model_validate(await admin_stats(db), from_attributes=True)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    _admin: Identity = Depends(get_admin_identity),
    db: AsyncSession = Depends(get_session),
) -> AnalyticsResponse:
    return AnalyticsResponse.model_validate(await analytics(db))


@router.post("/cleanup", response_model=CleanupResponse)
async def clean_database(
    body: CleanupRequest,
    _admin: Identity = Depends(get_admin_identity),
    settings: Settings = Depends(get_app_settings),
    db: AsyncSession = Depends(get_session),
) -> CleanupResponse:
    """Bulk-delete collections. Requires the configured cleanup password."""
    expected = settings.admin_cleanup_password
    if not expected or not secrets.compare_digest(body.password.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid admin password")
    results = await cleanup(db, body.collections, settings.admin_emails)
    return CleanupResponse(message="Database cleanup completed", results=results)

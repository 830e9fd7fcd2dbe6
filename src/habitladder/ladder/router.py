"""Ladder endpoints for participants: /api/ladder/*."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.database import get_session
from habitladder.ladder.registry import current_question
from habitladder.ladder.schemas import (
    CurrentQuestionResponse,
    QuestionResponse,
    SubmissionListResponse,
    SubmissionRequest,
    SubmissionResponse,
    SubmissionSavedResponse,
)
from habitladder.ladder.submissions import list_user_submissions, save_submission

router = APIRouter(prefix="/api/ladder", tags=["Ladder"])


@router.get("/questions", response_model=CurrentQuestionResponse)
async def get_current_question(
    week: str | None = Query(None),
    _identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> CurrentQuestionResponse:
    """The current (newest active) question for a week, or null."""
    question = await current_question(db, week)
    return CurrentQuestionResponse(
        question=QuestionResponse.model_validate(question) if question is not None else None
    )


@router.get("/submissions", response_model=SubmissionListResponse)
async def get_my_submissions(
    week: str | None = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> SubmissionListResponse:
    submissions = await list_user_submissions(db, identity.id, week)
    return SubmissionListResponse(submissions=[SubmissionResponse.model_validate(s) for s in submissions])


@router.post("/submissions", response_model=SubmissionSavedResponse)
async def submit_answers(
    body: SubmissionRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> JSONResponse:
    """Create or update the caller's submission for a week."""
    submission, created = await save_submission(
        db,
        identity,
        week=body.week,
        question_id=body.question_id,
        responses=[r.model_dump() for r in body.responses],
        status=body.status,
    )
    payload = SubmissionSavedResponse(
        message="Submission created successfully" if created else "Submission updated successfully",
        submission=SubmissionResponse.model_validate(submission),
    )
    return JSONResponse(status_code=201 if created else 200, content=payload.model_dump(mode="json"))

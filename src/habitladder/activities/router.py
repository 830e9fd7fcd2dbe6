"""Activity endpoints: /api/activities."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.activities.schemas import (
    ActivityCompletionList,
    ActivityCompletionRequest,
    ActivityCompletionResponse,
    ActivityCompletionResult,
    ActivityCreateRequest,
    ActivityEnvelope,
    ActivityListResponse,
    ActivityProgressResponse,
    ActivityResponse,
    ActivityUpdateRequest,
)
from habitladder.activities.service import (
    activity_progress,
    complete_activity,
    create_activity,
    delete_activity,
    get_activity,
    list_activities,
    list_activity_completions,
    update_activity,
)
from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.database import get_session
from habitladder.progress.schemas import ProgressResponse

router = APIRouter(prefix="/api/activities", tags=["Activities"])


@router.get("", response_model=ActivityListResponse)
async def get_activities(
    category: str | None = Query(None),
    is_active: bool | None = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityListResponse:
    activities = await list_activities(db, identity.id, category=category, is_active=is_active)
    return ActivityListResponse(activities=[ActivityResponse.model_validate(a) for a in activities])


@router.post("", response_model=ActivityEnvelope, status_code=201)
async def add_activity(
    body: ActivityCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityEnvelope:
    activity = await create_activity(db, identity.id, **body.model_dump())
    return ActivityEnvelope(activity=ActivityResponse.model_validate(activity))


# ── Completions & progress (before /{activity_id}) ──


@router.post("/completions", response_model=ActivityCompletionResult, status_code=201)
async def add_activity_completion(
    body: ActivityCompletionRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityCompletionResult:
    completion, progress = await complete_activity(db, identity.id, body.activity_id, notes=body.notes)
    return ActivityCompletionResult(
        completion=ActivityCompletionResponse.model_validate(completion),
        progress=ProgressResponse.model_validate(progress),
    )


@router.get("/completions", response_model=ActivityCompletionList)
async def get_activity_completions(
    activity_id: int | None = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityCompletionList:
    completions = await list_activity_completions(db, identity.id, activity_id)
    return ActivityCompletionList(completions=[ActivityCompletionResponse.model_validate(c) for c in completions])


@router.get("/progress", response_model=ActivityProgressResponse)
async def get_activity_progress(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityProgressResponse:
    return ActivityProgressResponse(**await activity_progress(db, identity.id))


# ── Single activity ──


@router.get("/{activity_id}", response_model=ActivityEnvelope)
async def get_one_activity(
    activity_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityEnvelope:
    return ActivityEnvelope(activity=ActivityResponse.model_validate(await get_activity(db, identity.id, activity_id)))


@router.put("/{activity_id}", response_model=ActivityEnvelope)
async def edit_activity(
    activity_id: int,
    body: ActivityUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> ActivityEnvelope:
    activity = await update_activity(db, identity.id, activity_id, body.model_dump(exclude_unset=True))
    return ActivityEnvelope(activity=ActivityResponse.model_validate(activity))


@router.delete("/{activity_id}")
async def remove_activity(
    activity_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    await delete_activity(db, identity.id, activity_id)
    return {"message": "Activity deleted successfully"}

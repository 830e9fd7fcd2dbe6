"""Completion endpoints: /api/habits/completions and /api/goals/completions."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.completions.schemas import (
    GoalCompletionList,
    GoalCompletionRequest,
    GoalCompletionResponse,
    GoalCompletionResult,
    HabitCompletionList,
    HabitCompletionRequest,
    HabitCompletionResponse,
    HabitCompletionResult,
)
from habitladder.completions.service import (
    complete_goal,
    complete_habit,
    list_goal_completions,
    list_habit_completions,
    undo_habit_completion,
)
from habitladder.database import get_session
from habitladder.progress.schemas import ProgressResponse

router = APIRouter(prefix="/api", tags=["Completions"])


# ── Habits ──


@router.post("/habits/completions", response_model=HabitCompletionResult, status_code=201)
async def add_habit_completion(
    body: HabitCompletionRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> HabitCompletionResult:
    completion, progress = await complete_habit(
        db, identity.id, body.habit_id, notes=body.notes, completed_at=body.completed_at
    )
    return HabitCompletionResult(
        completion=HabitCompletionResponse.model_validate(completion),
        progress=ProgressResponse.model_validate(progress),
    )


@router.get("/habits/completions", response_model=HabitCompletionList)
async def get_habit_completions(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> HabitCompletionList:
    """Completions newest first; the date range applies only when both ends are given."""
    completions = await list_habit_completions(db, identity.id, start_date, end_date)
    return HabitCompletionList(completions=[HabitCompletionResponse.model_validate(c) for c in completions])


@router.delete("/habits/completions")
async def remove_todays_habit_completion(
    habit_id: int = Query(...),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, bool]:
    await undo_habit_completion(db, identity.id, habit_id)
    return {"success": True}


# ── Goals ──


@router.post("/goals/completions", response_model=GoalCompletionResult, status_code=201)
async def add_goal_completion(
    body: GoalCompletionRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> GoalCompletionResult:
    completion, progress = await complete_goal(db, identity.id, body.goal_id, notes=body.notes)
    return GoalCompletionResult(
        completion=GoalCompletionResponse.model_validate(completion),
        progress=ProgressResponse.model_validate(progress),
    )


@router.get("/goals/completions", response_model=GoalCompletionList)
async def get_goal_completions(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> GoalCompletionList:
    completions = await list_goal_completions(db, identity.id)
    return GoalCompletionList(completions=[GoalCompletionResponse.model_validate(c) for c in completions])

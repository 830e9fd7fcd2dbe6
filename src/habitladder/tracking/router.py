"""Habit and goal endpoints: /api/habits and /api/goals."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.dependencies import get_current_identity
from habitladder.auth.session import Identity
from habitladder.database import get_session
from habitladder.tracking.schemas import (
    GoalEnvelope,
    GoalListResponse,
    HabitEnvelope,
    HabitListResponse,
    TrackableCreateRequest,
    TrackableResponse,
)
from habitladder.tracking.service import (
    create_goal,
    create_habit,
    deactivate_goal,
    deactivate_habit,
    list_goals,
    list_habits,
)

router = APIRouter(prefix="/api", tags=["Habits & Goals"])


# ── Habits ──


@router.get("/habits", response_model=HabitListResponse)
async def get_habits(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> HabitListResponse:
    habits = await list_habits(db, identity.id)
    return HabitListResponse(habits=[TrackableResponse.model_validate(h) for h in habits])


@router.post("/habits", response_model=HabitEnvelope, status_code=201)
async def add_habit(
    body: TrackableCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> HabitEnvelope:
    habit = await create_habit(db, identity.id, **body.model_dump())
    return HabitEnvelope(habit=TrackableResponse.model_validate(habit))


@router.delete("/habits/{habit_id}")
async def remove_habit(
    habit_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    """Deactivate a habit. Its completion history is kept."""
    await deactivate_habit(db, identity.id, habit_id)
    return {"message": "Habit deactivated"}


# ── Goals ──


@router.get("/goals", response_model=GoalListResponse)
async def get_goals(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> GoalListResponse:
    goals = await list_goals(db, identity.id)
    return GoalListResponse(goals=[TrackableResponse.model_validate(g) for g in goals])


@router.post("/goals", response_model=GoalEnvelope, status_code=201)
async def add_goal(
    body: TrackableCreateRequest,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> GoalEnvelope:
    goal = await create_goal(db, identity.id, **body.model_dump())
    return GoalEnvelope(goal=TrackableResponse.model_validate(goal))


@router.delete("/goals/{goal_id}")
async def remove_goal(
    goal_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_session),
) -> dict[str, str]:
    """Deactivate a goal. Its completion history is kept."""
    await deactivate_goal(db, identity.id, goal_id)
    return {"message": "Goal deactivated"}

"""Request/response models for habit and goal completions."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from habitladder.progress.schemas import ProgressResponse


class HabitCompletionRequest(BaseModel):
    habit_id: int
    notes: str | None = Field(None, max_length=200)
    completed_at: datetime | None = None


class GoalCompletionRequest(BaseModel):
    goal_id: int
    notes: str | None = Field(None, max_length=200)


class HabitCompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    habit_id: int
    user_id: int
    completed_at: datetime
    points: int
    streak: int
    notes: str | None = None


class GoalCompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    goal_id: int
    user_id: int
    completed_at: datetime
    points: int
    streak: int
    notes: str | None = None


class HabitCompletionResult(BaseModel):
    completion: HabitCompletionResponse
    progress: ProgressResponse


class GoalCompletionResult(BaseModel):
    completion: GoalCompletionResponse
    progress: ProgressResponse


class HabitCompletionList(BaseModel):
    completions: list[HabitCompletionResponse]


class GoalCompletionList(BaseModel):
    completions: list[GoalCompletionResponse]

"""Request/response models for habits and goals."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Intensity = Literal["easy", "medium", "hard"]
Category = Literal["health", "productivity", "learning", "mindfulness", "fitness", "creative", "social", "other"]
Frequency = Literal["daily", "weekly"]


class TrackableCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    intensity: Intensity = "medium"
    category: Category = "other"
    target_frequency: Frequency = "daily"


class TrackableResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str | None = None
    intensity: Intensity
    category: Category
    target_frequency: Frequency
    point_value: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class HabitEnvelope(BaseModel):
    habit: TrackableResponse


class HabitListResponse(BaseModel):
    habits: list[TrackableResponse]


class GoalEnvelope(BaseModel):
    goal: TrackableResponse


class GoalListResponse(BaseModel):
    goals: list[TrackableResponse]

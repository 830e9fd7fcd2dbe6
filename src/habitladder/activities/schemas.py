"""Request/response models for activities and their completions."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from habitladder.progress.schemas import ProgressResponse
from habitladder.tracking.schemas import Category, Intensity

ActivityFrequency = Literal["daily", "weekly", "monthly", "none"]


class ActivityCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    intensity: Intensity = "medium"
    category: Category = "other"
    target_frequency: ActivityFrequency = "none"
    is_recurring: bool = False
    deadline: datetime | None = None


class ActivityUpdateRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    intensity: Intensity | None = None
    category: Category | None = None
    target_frequency: ActivityFrequency | None = None
    is_active: bool | None = None
    is_recurring: bool | None = None
    deadline: datetime | None = None


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    description: str | None = None
    intensity: Intensity
    category: Category
    target_frequency: ActivityFrequency
    point_value: int
    is_active: bool
    is_recurring: bool
    deadline: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ActivityEnvelope(BaseModel):
    activity: ActivityResponse


class ActivityListResponse(BaseModel):
    activities: list[ActivityResponse]


class ActivityCompletionRequest(BaseModel):
    activity_id: int
    notes: str | None = Field(None, max_length=500)


class ActivityCompletionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    activity_id: int
    user_id: int
    completed_at: datetime
    points_earned: int
    notes: str | None = None


class ActivityCompletionResult(BaseModel):
    completion: ActivityCompletionResponse
    progress: ProgressResponse


class ActivityCompletionList(BaseModel):
    completions: list[ActivityCompletionResponse]


class ActivityProgressResponse(BaseModel):
    total_points: int
    level: int
    recent_completions_count: int

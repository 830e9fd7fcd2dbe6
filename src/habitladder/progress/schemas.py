"""Pydantic response models for progress endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

from habitladder.db.models import LadderProgress

LadderTheme = Literal["classic", "neon", "nature", "space", "minimal"]


class AchievementResponse(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    unlocked_at: datetime
    type: Literal["streak", "points", "completion", "milestone"]


class ProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    current_level: int
    total_points: int
    weekly_points: int
    current_streak: int
    longest_streak: int
    challenge_start_date: datetime
    completed_challenges: int
    achievements: list[AchievementResponse] = []
    ladder_theme: LadderTheme
    updated_at: datetime


class ProgressEnvelope(BaseModel):
    progress: ProgressResponse


class ThemeUpdateRequest(BaseModel):
    ladder_theme: LadderTheme


def progress_response(progress: LadderProgress) -> ProgressEnvelope:
    return ProgressEnvelope(progress=ProgressResponse.model_validate(progress))

"""Response models for admin user management, stats and analytics."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from habitladder.activities.schemas import ActivityCompletionResponse, ActivityResponse
from habitladder.progress.schemas import ProgressResponse
from habitladder.todos.schemas import TodoResponse


class UserResponse(BaseModel):
    """Account as shown to the admin; the password hash never leaves the service."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    created_at: datetime
    last_login: datetime | None = None


class UserListResponse(BaseModel):
    users: list[UserResponse]


class UserStats(BaseModel):
    total_activities: int
    total_todos: int
    total_completions: int
    total_points: int
    current_level: int


class UserDetailResponse(BaseModel):
    user: UserResponse
    stats: UserStats
    activities: list[ActivityResponse]
    todos: list[TodoResponse]
    completions: list[ActivityCompletionResponse]
    progress: ProgressResponse | None = None


class PlatformTotals(BaseModel):
    total_users: int
    total_activities: int
    total_todos: int
    total_completions: int


class TopActivity(BaseModel):
    id: int
    user_id: int
    title: str
    category: str
    completion_count: int


class AdminStatsResponse(BaseModel):
    stats: PlatformTotals
    recent_users: list[UserResponse]
    top_activities: list[TopActivity]
    recent_completions: list[ActivityCompletionResponse]


class DailyCount(BaseModel):
    date: str
    count: int


class DailyCompletions(BaseModel):
    date: str
    completions: int
    total_points: int


class CategoryStat(BaseModel):
    category: str
    count: int
    avg_point_value: float


class UserEngagement(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    completion_count: int
    activity_count: int
    todo_count: int
    total_points: int


class AnalyticsResponse(BaseModel):
    user_growth: list[DailyCount]
    completion_trends: list[DailyCompletions]
    category_stats: list[CategoryStat]
    user_engagement: list[UserEngagement]


class CleanupRequest(BaseModel):
    password: str
    collections: list[str] = []


class CleanupResponse(BaseModel):
    message: str
    results: dict[str, int]

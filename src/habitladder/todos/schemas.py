"""Request/response models for todos."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TodoCreateRequest(BaseModel):
    # blank titles are rejected by the service with a 400
    title: str = Field("", max_length=100)
    description: str | None = Field(None, max_length=500)
    activity_id: int | None = None
    goal_id: int | None = None
    is_repetitive: bool = False


class StandaloneTodoRequest(BaseModel):
    title: str = Field("", max_length=100)
    description: str | None = Field(None, max_length=500)
    is_repetitive: bool = False


class TodoUpdateRequest(BaseModel):
    title: str = Field("", max_length=100)
    description: str | None = Field(None, max_length=500)


class TodoStatusRequest(BaseModel):
    is_completed: bool | None = None
    is_archived: bool | None = None


class TodoRestoreRequest(BaseModel):
    todo_id: int


class TodoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    activity_id: int | None = None
    goal_id: int | None = None
    title: str
    description: str | None = None
    is_completed: bool
    is_archived: bool
    archived_at: datetime | None = None
    is_repetitive: bool
    last_shown: datetime
    created_at: datetime


class TodoEnvelope(BaseModel):
    todo: TodoResponse


class TodoListResponse(BaseModel):
    todos: list[TodoResponse]

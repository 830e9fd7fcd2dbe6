"""Request/response models for program applications."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ApplicationStatus = Literal["draft", "submitted", "reviewed", "accepted", "rejected"]


class ApplicationRequest(BaseModel):
    phone: str | None = Field(None, max_length=32)
    why_join: str | None = Field(None, max_length=1000)
    status: Literal["draft", "submitted"] = "draft"


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    email: str
    phone: str
    why_join: str
    status: ApplicationStatus
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationEnvelope(BaseModel):
    application: ApplicationResponse | None = None


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]


class ApplicationStatusRequest(BaseModel):
    # checked by the service so an unknown status is a 400, not a 422
    status: str


class ApplicationAnalyticsResponse(BaseModel):
    total: int
    by_status: dict[ApplicationStatus, int]
    recent_applications: int

"""Request/response models for ladder questions and submissions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Week = Literal["week1", "week2", "week3", "week4", "complete"]
FieldType = Literal["text", "textarea", "select", "radio", "checkbox", "file"]
SubmissionStatus = Literal["draft", "submitted", "reviewed", "approved", "rejected"]


# --- Questions ---


class FieldOption(BaseModel):
    value: str
    label: str


class FieldValidation(BaseModel):
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)
    pattern: str | None = None


class QuestionField(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    type: FieldType
    label: str = Field(..., min_length=1)
    placeholder: str | None = None
    required: bool = False
    options: list[FieldOption] = []
    validation: FieldValidation | None = None


class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    week: Week
    title: str
    description: str | None = None
    fields: list[QuestionField] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime
    created_by: str


class CurrentQuestionResponse(BaseModel):
    question: QuestionResponse | None = None


class QuestionListResponse(BaseModel):
    questions: list[QuestionResponse]


class QuestionCreateRequest(BaseModel):
    # week is validated by the registry so bad tokens get the same 400 as lookups
    week: str
    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = None
    fields: list[QuestionField]


class QuestionUpdateRequest(BaseModel):
    week: str | None = None
    title: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = None
    fields: list[QuestionField] | None = None
    is_active: bool | None = None


class QuestionMutationResponse(BaseModel):
    message: str
    question: QuestionResponse


# --- Submissions ---


class SubmissionAnswer(BaseModel):
    field_id: str = Field(..., min_length=1)
    value: Any = None


class SubmissionRequest(BaseModel):
    week: str
    question_id: int
    responses: list[SubmissionAnswer]
    status: Literal["draft", "submitted"] = "draft"


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_email: str
    user_name: str
    week: Week
    question_id: int | None = None
    responses: list[SubmissionAnswer] = []
    status: SubmissionStatus
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    review_comments: str | None = None
    score: int | None = None
    created_at: datetime
    updated_at: datetime


class SubmissionEnvelope(BaseModel):
    submission: SubmissionResponse


class SubmissionSavedResponse(BaseModel):
    message: str
    submission: SubmissionResponse


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionResponse]


class SubmissionReviewRequest(BaseModel):
    status: str | None = None
    review_comments: str | None = None
    score: int | None = None

"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    """Email registration request."""

    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class IdentityResponse(BaseModel):
    id: int
    name: str
    email: str


class SessionResponse(BaseModel):
    """Current session. ``user`` is null for anonymous callers."""

    user: IdentityResponse | None = None
    is_admin: bool = False


class TokenResponse(BaseModel):
    """Returned by register/login. The same token is also set as a cookie."""

    session_token: str
    token_type: str = "bearer"
    user: IdentityResponse

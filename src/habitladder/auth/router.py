"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from habitladder.auth.dependencies import get_app_settings, get_identity
from habitladder.auth.jwt import create_session_token
from habitladder.auth.password import PasswordStrengthError
from habitladder.auth.policy import is_admin
from habitladder.auth.schemas import (
    IdentityResponse,
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    TokenResponse,
)
from habitladder.auth.service import authenticate_user, register_user
from habitladder.auth.session import Identity
from habitladder.config import Settings
from habitladder.database import get_session
from habitladder.db.models import User
from habitladder.errors import ValidationError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _issue_session(response: Response, user: User, settings: Settings) -> TokenResponse:
    """Sign a session token for ``user`` and attach it as an HTTP-only cookie."""
    token = create_session_token(user.id, user.name, user.email, settings=settings)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return TokenResponse(
        session_token=token,
        user=IdentityResponse(id=user.id, name=user.name, email=user.email),
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> TokenResponse:
    """Create an account and start a session."""
    try:
        user = await register_user(db, name=body.name, email=body.email, password=body.password, settings=settings)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _issue_session(response, user, settings)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> TokenResponse:
    """Check credentials and start a session."""
    try:
        user = await authenticate_user(db, body.email, body.password)
    except ValidationError as e:
        logger.info("login_failed")
        raise HTTPException(status_code=401, detail=e.message) from e
    logger.info("user_logged_in", user_id=user.id)
    return _issue_session(response, user, settings)


@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_app_settings)) -> dict[str, str]:
    """Clear the session cookie."""
    response.delete_cookie(settings.session_cookie_name)
    return {"message": "Logged out"}


@router.get("/session", response_model=SessionResponse)
async def current_session(
    identity: Identity | None = Depends(get_identity),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """Return the caller's identity, or an empty session for anonymous callers."""
    if identity is None:
        return SessionResponse()
    return SessionResponse(
        user=IdentityResponse(id=identity.id, name=identity.name, email=identity.email),
        is_admin=is_admin(identity, settings.admin_emails),
    )

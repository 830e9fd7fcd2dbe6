"""
Signed session tokens.

The session token is an HS256 JWT carrying the identity claims (``sub``,
``name``, ``email``). It is issued at login/registration and set as an
HTTP-only cookie; API clients may send it as a bearer token instead.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from habitladder.config import Settings, get_settings

SESSION_TOKEN_TYPE = "session"


def create_session_token(
    user_id: int,
    name: str,
    email: str,
    *,
    expires_in: timedelta | None = None,
    settings: Settings | None = None,
) -> str:
    """
    Create a signed session token for a user.

    Args:
        user_id: The user's database ID.
        name: Display name carried in the session.
        email: Account email carried in the session.
        expires_in: Override the configured lifetime (tests).
        settings: Signing settings; defaults to the process-wide settings.

    Returns:
        Encoded JWT string.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    lifetime = expires_in if expires_in is not None else timedelta(minutes=settings.session_expire_minutes)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "name": name,
        "email": email,
        "iat": now,
        "exp": now + lifetime,
        "iss": settings.session_issuer,
        "type": SESSION_TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def verify_token(
    token: str, expected_type: str = SESSION_TOKEN_TYPE, settings: Settings | None = None
) -> dict[str, Any]:
    """
    Verify and decode a session token.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or of the wrong type.
    """
    settings = settings or get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[settings.session_algorithm],
            issuer=settings.session_issuer,
            options={"require": ["sub", "exp", "iss"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    if payload.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)

    return payload

"""Session resolution: inbound request -> Identity or anonymous."""

from __future__ import annotations

from dataclasses import dataclass

import jwt
import structlog
from starlette.requests import HTTPConnection

from habitladder.auth.jwt import verify_token
from habitladder.config import Settings, settings_for

logger = structlog.get_logger()


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, taken verbatim from the session token."""

    id: int
    name: str
    email: str


def _extract_token(conn: HTTPConnection, settings: Settings) -> str | None:
    token = conn.cookies.get(settings.session_cookie_name)
    if token:
        return token
    scheme, _, credentials = conn.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def resolve(conn: HTTPConnection) -> Identity | None:
    """Return the caller's identity, or None when the session is absent or invalid."""
    settings = settings_for(conn)
    token = _extract_token(conn, settings)
    if token is None:
        return None
    try:
        payload = verify_token(token, settings=settings)
        return Identity(
            id=int(payload["sub"]),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
        )
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.debug("session_rejected", reason=str(e))
        return None

"""FastAPI authentication dependencies."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from habitladder.auth.policy import is_admin
from habitladder.auth.session import Identity, resolve
from habitladder.config import Settings, settings_for


async def get_app_settings(request: Request) -> Settings:
    """Settings of the app handling this request."""
    return settings_for(request)


async def get_identity(request: Request) -> Identity | None:
    """Resolve the session; None means anonymous."""
    return resolve(request)


async def get_current_identity(
    identity: Identity | None = Depends(get_identity),
) -> Identity:
    """Require an authenticated caller. Raises 401 for anonymous requests."""
    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return identity


async def get_admin_identity(
    identity: Identity | None = Depends(get_identity),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    """
    Require the administrator.

    Non-admin callers get the same 401 as anonymous ones, so admin APIs do
    not reveal whether a session exists.
    """
    if identity is None or not is_admin(identity, settings.admin_emails):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return identity

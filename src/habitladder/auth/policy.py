"""
Access policy.

Pure functions over an identity (or None for anonymous callers) and the
requested path. Nothing here touches the request or storage.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from habitladder.auth.session import Identity

LOGIN_PATH = "/login"
DASHBOARD_PATH = "/dashboard"

# Page prefixes enforced by the gate middleware; everything else is public.
PROTECTED_PREFIXES = ("/dashboard", "/admin", "/tasks", "/ladder")
ADMIN_PREFIX = "/admin"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    redirect_to: str | None = None


ALLOW = Decision(allowed=True)


def is_admin(identity: Identity | None, admin_emails: Collection[str]) -> bool:
    """True iff the identity's email exactly matches a configured admin address."""
    if identity is None or not identity.email:
        return False
    return identity.email in admin_emails


def require_auth(identity: Identity | None) -> Decision:
    if identity is None:
        return Decision(allowed=False, redirect_to=LOGIN_PATH)
    return ALLOW


def require_admin(identity: Identity | None, admin_emails: Collection[str]) -> Decision:
    if identity is None:
        return Decision(allowed=False, redirect_to=LOGIN_PATH)
    if not is_admin(identity, admin_emails):
        return Decision(allowed=False, redirect_to=DASHBOARD_PATH)
    return ALLOW


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_protected_path(path: str) -> bool:
    return any(_under(path, prefix) for prefix in PROTECTED_PREFIXES)


def check_page_access(identity: Identity | None, path: str, admin_emails: Collection[str]) -> Decision:
    """Apply the page route matrix to ``path``. Unprotected paths are always allowed."""
    if _under(path, ADMIN_PREFIX):
        return require_admin(identity, admin_emails)
    if is_protected_path(path):
        return require_auth(identity)
    return ALLOW

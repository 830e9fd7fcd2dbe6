"""
Account business logic: registration and credential checks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from habitladder.auth.password import check_needs_rehash, hash_password, validate_password_strength, verify_password
from habitladder.db.models import User
from habitladder.errors import ConflictError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from habitladder.config import Settings

logger = structlog.get_logger()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def register_user(
    db: AsyncSession, name: str, email: str, password: str, settings: Settings | None = None
) -> User:
    """
    Create an account.

    Raises:
        PasswordStrengthError: If the password is out of bounds.
        ConflictError: If the email is already registered.
    """
    validate_password_strength(password, settings)

    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)

    now = datetime.now(timezone.utc)
    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        created_at=now,
        last_login=now,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        msg = "Email already registered"
        raise ConflictError(msg) from e
    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Check email + password.

    Raises:
        ValidationError: If the credentials do not match.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise ValidationError("credentials", "Invalid email or password")

    user.last_login = datetime.now(timezone.utc)
    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        logger.info("password_rehashed", user_id=user.id)
    await db.commit()
    return user

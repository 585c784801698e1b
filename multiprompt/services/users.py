"""User lookup, authentication and admin bootstrap."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.config import settings
from multiprompt.core.security import hash_password, verify_password
from multiprompt.models.user import User

logger = logging.getLogger(__name__)


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def authenticate(db: AsyncSession, username: str, password: str) -> User | None:
    """Return the active user if the password matches, else None."""
    user = await get_user_by_username(db, username)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def ensure_admin(db: AsyncSession) -> User:
    """Create the bootstrap admin from ADMIN_USER / ADMIN_PASSWORD if it does not exist."""
    existing = await get_user_by_username(db, settings.admin_user)
    if existing:
        return existing

    user = User(username=settings.admin_user, password_hash=hash_password(settings.admin_password))
    db.add(user)
    await db.flush()
    logger.info('Created admin user "%s"', settings.admin_user)
    return user

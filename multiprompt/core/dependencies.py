from uuid import UUID

import jwt
from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.config import settings
from multiprompt.core.exceptions import UnauthorizedError
from multiprompt.core.security import SESSION_TOKEN_TYPE, decode_token
from multiprompt.db.session import get_db
from multiprompt.fanout.dispatcher import FanOutDispatcher
from multiprompt.models.user import User


def _extract_token(request: Request) -> str | None:
    """Session cookie first, then an ``Authorization: Bearer`` header for API clients."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[7:]
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    token = _extract_token(request)
    if not token:
        raise UnauthorizedError()

    try:
        payload = decode_token(token)
    except jwt.PyJWTError:
        raise UnauthorizedError("Invalid or expired session")

    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise UnauthorizedError("Invalid session type")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid session payload")

    try:
        uid = UUID(user_id)
    except ValueError:
        raise UnauthorizedError("Invalid session payload")

    result = await db.execute(select(User).where(User.id == uid, User.is_active == True))  # noqa: E712
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError("User not found or inactive")

    return user


_dispatcher: FanOutDispatcher | None = None


def get_dispatcher() -> FanOutDispatcher:
    """Process-wide dispatcher (stateless between requests; adapters are reused)."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = FanOutDispatcher()
    return _dispatcher

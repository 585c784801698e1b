"""Session auth: login sets a signed session cookie, logout clears it."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.config import settings
from multiprompt.core.exceptions import UnauthorizedError
from multiprompt.core.rate_limit import limiter
from multiprompt.core.security import create_session_token, session_max_age_seconds
from multiprompt.db.session import get_db
from multiprompt.schemas.auth import LoginRequest
from multiprompt.schemas.common import OkResponse
from multiprompt.services.users import authenticate

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=OkResponse)
@limiter.limit(settings.login_rate_limit)
async def login(request: Request, response: Response, body: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await authenticate(db, body.username, body.password)
    if not user:
        raise UnauthorizedError("invalid credentials")

    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_session_token(user.id),
        max_age=session_max_age_seconds(),
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return OkResponse()


@router.post("/logout", response_model=OkResponse)
async def logout(response: Response):
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return OkResponse()

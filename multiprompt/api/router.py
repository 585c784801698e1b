from fastapi import APIRouter

from multiprompt.api.accounts import router as accounts_router
from multiprompt.api.auth import router as auth_router
from multiprompt.api.prompt import router as prompt_router
from multiprompt.api.settings import router as settings_router
from multiprompt.api.users import router as users_router

api_router = APIRouter(prefix="/api")
api_router.include_router(users_router)
api_router.include_router(settings_router)
api_router.include_router(accounts_router)
api_router.include_router(prompt_router)

__all__ = ["api_router", "auth_router"]

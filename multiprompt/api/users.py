from fastapi import APIRouter, Depends

from multiprompt.core.dependencies import get_current_user
from multiprompt.models.user import User
from multiprompt.schemas.auth import MeResponse, UserInfo

router = APIRouter(tags=["users"])


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    return MeResponse(user=UserInfo.model_validate(user))

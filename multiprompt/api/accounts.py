from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.dependencies import get_current_user
from multiprompt.db.session import get_db
from multiprompt.models.user import User
from multiprompt.schemas.account import AccountsResponse
from multiprompt.services.credentials import list_accounts, resolve_credentials

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=AccountsResponse)
async def get_accounts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Provider accounts the current user can broadcast to."""
    bundle = await resolve_credentials(db, user.id)
    return {"accounts": [account.to_dict() for account in list_accounts(bundle)]}

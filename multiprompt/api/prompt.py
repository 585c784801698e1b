"""Prompt fan-out endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.dependencies import get_current_user, get_dispatcher
from multiprompt.core.exceptions import BadRequestError
from multiprompt.db.session import get_db
from multiprompt.fanout.dispatcher import FanOutDispatcher, FanOutValidationError, validate_request
from multiprompt.models.user import User
from multiprompt.schemas.prompt import PromptRequest, PromptResponse
from multiprompt.services.credentials import resolve_credentials

router = APIRouter(prefix="/prompt", tags=["prompt"])


@router.post("", response_model=PromptResponse, response_model_exclude_none=True)
async def broadcast_prompt(
    body: PromptRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    dispatcher: FanOutDispatcher = Depends(get_dispatcher),
):
    """Send one prompt to every requested account and return once all have settled.

    Per-account failures are reported inside ``results``; the request itself
    only fails (400) when the prompt or account list is unusable.
    """
    try:
        validate_request(body.prompt, body.account_ids)
    except FanOutValidationError as e:
        raise BadRequestError(str(e))

    credentials = await resolve_credentials(db, user.id)
    response = await dispatcher.run(body.prompt, body.account_ids, credentials)
    return response.to_dict()

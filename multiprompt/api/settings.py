"""Settings API: per-provider API key and model. Keys are write-only."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.dependencies import get_current_user
from multiprompt.db.session import get_db
from multiprompt.fanout.types import Provider
from multiprompt.models.user import User
from multiprompt.schemas.settings import SettingsResponse, SettingsUpdate
from multiprompt.services.credentials import resolve_credentials, settings_view, update_user_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
async def get_settings(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Show which providers have a usable key and which model each will use (never returns keys)."""
    bundle = await resolve_credentials(db, user.id)
    return settings_view(bundle)


@router.post("", response_model=SettingsResponse)
async def update_settings(
    payload: SettingsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update stored keys/models. Only provided fields are updated; empty values clear them."""
    changes: dict[Provider, dict[str, str | None]] = {}
    for name in payload.model_fields_set:
        update = getattr(payload, name)
        if update is None:
            continue
        changes[Provider(name)] = {field: getattr(update, field) for field in update.model_fields_set}

    await update_user_settings(db, user.id, changes)

    bundle = await resolve_credentials(db, user.id)
    return settings_view(bundle)

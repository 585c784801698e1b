"""Credential resolver: user to decrypted provider credentials.

Merges two sources, user first:
  1. the user's stored (Fernet-encrypted) key and chosen model
  2. process-wide fallbacks from the environment (OPENAI_API_KEY_1, OPENAI_MODEL_1, ...)

A provider with no key anywhere resolves to ``api_key=None``; that is a normal
state, not an error. A stored key that cannot be decrypted makes that provider
unusable (``api_key=None``) without touching the others, and does not fall back
to the environment key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from multiprompt.core.config import settings
from multiprompt.core.encryption import decrypt_api_key, encrypt_api_key
from multiprompt.fanout.adapters import ADAPTER_REGISTRY, default_model_for
from multiprompt.fanout.types import (
    Account,
    CredentialBundle,
    Provider,
    ProviderCredential,
    make_account_id,
)
from multiprompt.models.provider_credential import ProviderCredential as StoredCredential

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserProviderSettings:
    """What the user stored for one provider, after decryption.

    ``key_stored`` is True whenever ciphertext exists, even if it failed to
    decrypt (``api_key`` is then None).
    """

    api_key: str | None = None
    model: str | None = None
    key_stored: bool = False


def env_fallbacks() -> dict[Provider, ProviderCredential]:
    """Process-wide credentials from settings; model is "" when not set."""
    return {
        Provider.OPENAI: ProviderCredential(
            api_key=settings.openai_api_key_1 or None, model=settings.openai_model_1
        ),
        Provider.ANTHROPIC: ProviderCredential(
            api_key=settings.anthropic_api_key_1 or None, model=settings.anthropic_model_1
        ),
        Provider.GEMINI: ProviderCredential(
            api_key=settings.gemini_api_key_1 or None, model=settings.gemini_model_1
        ),
    }


def merge_credentials(
    stored: dict[Provider, UserProviderSettings],
    fallbacks: dict[Provider, ProviderCredential],
) -> CredentialBundle:
    """Combine user settings and fallbacks into one bundle covering every registered provider."""
    bundle: CredentialBundle = {}
    for provider in ADAPTER_REGISTRY:
        user = stored.get(provider, UserProviderSettings())
        fallback = fallbacks.get(provider)

        if user.key_stored:
            api_key = user.api_key or None
        else:
            api_key = fallback.api_key if fallback else None

        model = user.model or (fallback.model if fallback else "") or default_model_for(provider)
        bundle[provider] = ProviderCredential(api_key=api_key, model=model)
    return bundle


async def load_user_settings(db: AsyncSession, user_id: UUID) -> dict[Provider, UserProviderSettings]:
    """Read and decrypt a user's stored provider settings. Unknown provider rows are skipped."""
    result = await db.execute(select(StoredCredential).where(StoredCredential.user_id == user_id))
    rows = result.scalars().all()

    stored: dict[Provider, UserProviderSettings] = {}
    for row in rows:
        try:
            provider = Provider(row.provider)
        except ValueError:
            logger.warning("Ignoring stored credential for unknown provider %r", row.provider)
            continue

        api_key: str | None = None
        if row.api_key:
            try:
                api_key = decrypt_api_key(row.api_key) or None
            except ValueError as e:
                # FERNET_KEY missing
                logger.error("Cannot decrypt %s key for user %s: %s", provider.value, user_id, e)
            if api_key is None:
                logger.warning("Stored %s key for user %s is unusable", provider.value, user_id)

        stored[provider] = UserProviderSettings(
            api_key=api_key,
            model=row.model or None,
            key_stored=bool(row.api_key),
        )
    return stored


async def resolve_credentials(db: AsyncSession, user_id: UUID) -> CredentialBundle:
    """Resolve the credential bundle for one user. Database read only, no provider calls."""
    stored = await load_user_settings(db, user_id)
    return merge_credentials(stored, env_fallbacks())


async def update_user_settings(
    db: AsyncSession,
    user_id: UUID,
    changes: dict[Provider, dict[str, str | None]],
) -> None:
    """Apply partial updates, e.g. ``{Provider.OPENAI: {"api_key": "sk-...", "model": None}}``.

    Only keys present in a provider's dict are touched. A non-empty ``api_key``
    is encrypted and stored; an empty or None value clears the stored key. The
    same goes for ``model``.
    """
    if not changes:
        return

    result = await db.execute(select(StoredCredential).where(StoredCredential.user_id == user_id))
    rows = {row.provider: row for row in result.scalars().all()}

    for provider, fields in changes.items():
        if not fields:
            continue
        row = rows.get(provider.value)
        if row is None:
            row = StoredCredential(user_id=user_id, provider=provider.value)
            db.add(row)
            rows[provider.value] = row

        if "api_key" in fields:
            api_key = (fields["api_key"] or "").strip()
            row.api_key = encrypt_api_key(api_key) if api_key else None
            logger.info("User %s %s %s key", user_id, "set" if api_key else "cleared", provider.value)
        if "model" in fields:
            model = (fields["model"] or "").strip()
            row.model = model or None

    await db.flush()


def settings_view(bundle: CredentialBundle) -> dict[str, dict]:
    """Masked per-provider view: whether a key resolves and which model will be used."""
    return {
        provider.value: {"hasKey": bool(credential.api_key), "model": credential.model}
        for provider, credential in bundle.items()
    }


def list_accounts(bundle: CredentialBundle) -> list[Account]:
    """Accounts the user can broadcast to: every provider with a usable key."""
    accounts: list[Account] = []
    for provider in ADAPTER_REGISTRY:
        credential = bundle.get(provider)
        if credential is None or not credential.api_key:
            continue
        accounts.append(
            Account(
                id=make_account_id(provider),
                provider=provider,
                display_name=provider.display_name,
                model=credential.model,
            )
        )
    return accounts

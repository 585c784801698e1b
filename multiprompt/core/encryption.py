"""At-rest encryption of users' provider API keys.

Keys are stored as Fernet tokens in ``provider_credentials.api_key`` and only
decrypted by the credential resolver, right before a fan-out. FERNET_KEY must
stay stable: rotating it makes every stored key unreadable, which the resolver
reports as "key not set" for the affected providers.
"""

import logging

from cryptography.fernet import Fernet, InvalidToken

from multiprompt.core.config import settings

logger = logging.getLogger(__name__)

_fernet: Fernet | None = None


def _get_fernet() -> Fernet:
    global _fernet
    if _fernet is None:
        if not settings.fernet_key:
            raise ValueError("FERNET_KEY is not configured, provider keys cannot be stored or read")
        _fernet = Fernet(settings.fernet_key.encode())
    return _fernet


def reset_fernet() -> None:
    """Forget the cached cipher; the next call re-reads FERNET_KEY."""
    global _fernet
    _fernet = None


def encrypt_api_key(api_key: str) -> bytes:
    return _get_fernet().encrypt(api_key.encode("utf-8"))


def decrypt_api_key(token: bytes) -> str:
    """Plaintext provider key, or "" when the token is empty or unreadable.

    Raises ValueError only when FERNET_KEY itself is missing.
    """
    if not token:
        return ""
    try:
        return _get_fernet().decrypt(token).decode("utf-8")
    except InvalidToken:
        logger.error("Stored provider key is unreadable (FERNET_KEY changed or data corrupted)")
        return ""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

from multiprompt.core.config import settings

_ph = PasswordHasher()

SESSION_TOKEN_TYPE = "session"


def hash_password(password: str) -> str:
    return _ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False


def create_session_token(user_id: UUID) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": SESSION_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(days=settings.session_expire_days),
    }
    return jwt.encode(payload, settings.session_secret_key, algorithm=settings.session_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a session token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.session_secret_key, algorithms=[settings.session_algorithm])


def session_max_age_seconds() -> int:
    return settings.session_expire_days * 24 * 60 * 60

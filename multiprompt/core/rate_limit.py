"""Rate limiting configuration using slowapi."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from multiprompt.core.config import settings

# Keyed by client address; only login is decorated
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

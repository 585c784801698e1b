"""Sentry error tracking.

Enabled only when SENTRY_DSN is set. Provider credentials travel in request
headers and settings bodies, so every event is scrubbed before it leaves the
process.
"""

import logging
from typing import Any

from multiprompt.core.config import settings

logger = logging.getLogger(__name__)

FILTERED = "[Filtered]"

# Header / body keys that may carry a provider key or a session
SENSITIVE_KEYS = frozenset(
    {
        "authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
        "x-goog-api-key",
        "apikey",
        "api_key",
        "password",
    }
)


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: FILTERED if str(k).lower() in SENSITIVE_KEYS else _scrub(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(v) for v in value]
    return value


def scrub_event(event: dict, hint: dict | None = None) -> dict:
    """``before_send`` hook: mask credentials in request data and breadcrumbs."""
    request = event.get("request")
    if isinstance(request, dict):
        for key in ("headers", "data", "cookies"):
            if key in request:
                request[key] = _scrub(request[key])

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, dict) and isinstance(breadcrumbs.get("values"), list):
        for crumb in breadcrumbs["values"]:
            if isinstance(crumb, dict) and "data" in crumb:
                crumb["data"] = _scrub(crumb["data"])
    return event


def init_sentry() -> None:
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.httpx import HttpxIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        send_default_pii=False,
        before_send=scrub_event,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            HttpxIntegration(),
        ],
    )
    logger.info("Sentry initialized (env=%s)", settings.app_env)

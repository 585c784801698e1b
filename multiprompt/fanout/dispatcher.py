"""Fan-out dispatcher: one prompt sent to many accounts at once.

Usage:
    dispatcher = FanOutDispatcher()
    response = await dispatcher.run("Hello", ["openai-1", "anthropic-1"], credentials)

Every account id gets its own coroutine; all of them are started together and
joined with ``asyncio.gather``. Each coroutine turns any failure into a
CallResult(ok=False) before the join, so one provider cannot take down the
others. Results come back in input order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence

import httpx

from multiprompt.core.metrics import record_provider_call
from multiprompt.fanout.adapters import (
    ADAPTER_REGISTRY,
    BaseProviderAdapter,
    UnknownAccountError,
    get_adapter,
)
from multiprompt.fanout.aggregator import aggregate
from multiprompt.fanout.types import (
    CallResult,
    CredentialBundle,
    FanOutResponse,
    Provider,
    parse_account_id,
)

logger = logging.getLogger(__name__)


class FanOutValidationError(ValueError):
    """Caller supplied an unusable prompt or account list. Nothing was dispatched."""


def validate_request(prompt: object, account_ids: object) -> None:
    if not isinstance(prompt, str) or not prompt.strip():
        raise FanOutValidationError("prompt and accountIds[] required")
    if not isinstance(account_ids, (list, tuple)) or len(account_ids) == 0:
        raise FanOutValidationError("prompt and accountIds[] required")
    if not all(isinstance(a, str) for a in account_ids):
        raise FanOutValidationError("accountIds[] must contain only strings")


def _error_message(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


class FanOutDispatcher:
    """Dispatch a prompt to every requested account concurrently."""

    def __init__(
        self,
        adapters: Mapping[Provider, BaseProviderAdapter] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            adapters: Override adapters per provider (others are built from the registry)
            transport: httpx transport handed to registry-built adapters
        """
        self._adapters: dict[Provider, BaseProviderAdapter] = dict(adapters or {})
        self._transport = transport

    def _get_adapter(self, provider: Provider) -> BaseProviderAdapter:
        """Get or create adapter for a provider."""
        if provider not in self._adapters:
            self._adapters[provider] = get_adapter(provider, transport=self._transport)
        return self._adapters[provider]

    async def _invoke_one(self, account_id: str, prompt: str, credentials: CredentialBundle) -> CallResult:
        start = time.monotonic()
        provider: Provider | None = None
        try:
            parsed = parse_account_id(account_id)
            if parsed is None or parsed[0] not in ADAPTER_REGISTRY:
                raise UnknownAccountError(account_id)
            provider = parsed[0]

            adapter = self._get_adapter(provider)
            text = await adapter.invoke(credentials.get(provider), prompt)
            elapsed_ms = int((time.monotonic() - start) * 1000)
            result = CallResult.success(account_id, provider, text, elapsed_ms)
        except Exception as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            result = CallResult.failure(account_id, provider, _error_message(e), elapsed_ms)

        log_extra = {
            "account_id": account_id,
            "provider": provider.value if provider else None,
            "elapsed_ms": result.elapsed_ms,
        }
        if result.ok:
            logger.info("Account %s ok in %dms", account_id, result.elapsed_ms, extra=log_extra)
        else:
            logger.warning(
                "Account %s failed in %dms: %s", account_id, result.elapsed_ms, result.error, extra=log_extra
            )
        if provider is not None:
            record_provider_call(provider.value, result.ok, result.elapsed_ms)
        return result

    async def dispatch(
        self,
        prompt: str,
        account_ids: Sequence[str],
        credentials: CredentialBundle,
    ) -> list[CallResult]:
        """Call every account in parallel and return one CallResult per id, in input order."""
        validate_request(prompt, account_ids)

        logger.info("Dispatching prompt (%d chars) to %d account(s)", len(prompt), len(account_ids))
        tasks = [self._invoke_one(account_id, prompt, credentials) for account_id in account_ids]
        return list(await asyncio.gather(*tasks))

    async def run(
        self,
        prompt: str,
        account_ids: Sequence[str],
        credentials: CredentialBundle,
    ) -> FanOutResponse:
        """Dispatch and aggregate into the response envelope."""
        results = await self.dispatch(prompt, account_ids, credentials)
        response = aggregate(prompt, results)
        logger.info(
            "Fan-out settled: %d/%d ok, total %dms",
            sum(1 for r in results if r.ok),
            len(results),
            response.total_ms,
        )
        return response

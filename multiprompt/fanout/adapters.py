"""Provider adapters: protocol-level handling for each LLM provider.

Every adapter exposes the same capability: given a credential and a prompt,
return completion text or raise a ProviderError. Request/response shapes stay
inside the adapter:

  - OpenAI: chat completions, ``choices[0].message.content``
  - Anthropic: messages API, ``content[0].text``
  - Gemini: generateContent, ``candidates[0].content.parts[*].text`` joined

One outbound request per invocation. No retries, no streaming.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx

from multiprompt.core.config import settings
from multiprompt.fanout.types import NO_CONTENT, Provider, ProviderCredential

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ProviderError(Exception):
    """Base class for per-account failures."""


class MissingCredentialError(ProviderError):
    """No API key resolved for this provider; raised before any request is made."""

    def __init__(self, provider: Provider):
        super().__init__(f"{provider.display_name} key not set")
        self.provider = provider


class UnknownAccountError(ProviderError):
    """Account id does not name a known provider slot."""

    def __init__(self, account_id: str):
        super().__init__(f"Unknown account: {account_id}")
        self.account_id = account_id


class ProviderHttpError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, provider: Provider, status_code: int, body: str):
        super().__init__(f"{provider.display_name} HTTP {status_code}: {body}")
        self.provider = provider
        self.status_code = status_code
        self.body = body


class ProviderMalformedResponseError(ProviderError):
    """Provider answered 2xx with a body that is not JSON."""

    def __init__(self, provider: Provider, body: str):
        super().__init__(f"{provider.display_name} returned a non-JSON body: {body[:200]}")
        self.provider = provider
        self.body = body


# ---------------------------------------------------------------------------
# Base adapter
# ---------------------------------------------------------------------------


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters."""

    provider: Provider
    default_model: str

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout: HTTP timeout in seconds (defaults to settings.provider_timeout_seconds)
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds
        self.transport = transport

    @abstractmethod
    def build_request(self, api_key: str, model: str, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (url, headers, json payload) for one completion call."""
        ...

    @abstractmethod
    def extract_text(self, data: Any) -> str:
        """Pull completion text out of a decoded 2xx body. Empty string if absent."""
        ...

    async def invoke(self, credential: ProviderCredential | None, prompt: str) -> str:
        """Send *prompt* with *credential* and return the completion text."""
        if credential is None or not credential.api_key:
            raise MissingCredentialError(self.provider)

        model = credential.model or self.default_model
        url, headers, payload = self.build_request(credential.api_key, model, prompt)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.post(url, json=payload, headers=headers)

        if not resp.is_success:
            logger.warning("%s API %d for model=%s", self.provider.value, resp.status_code, model)
            raise ProviderHttpError(self.provider, resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError:
            raise ProviderMalformedResponseError(self.provider, resp.text)

        text = self.extract_text(data)
        if not text:
            logger.info("%s returned no completion text for model=%s", self.provider.value, model)
            return NO_CONTENT
        return text


def _first(items: Any) -> Any:
    """First element of a list, or None for anything else."""
    if isinstance(items, list) and items:
        return items[0]
    return None


def _get(obj: Any, key: str) -> Any:
    return obj.get(key) if isinstance(obj, dict) else None


# ---------------------------------------------------------------------------
# OpenAI Adapter
# ---------------------------------------------------------------------------


class OpenAIAdapter(BaseProviderAdapter):
    """OpenAI Chat Completions adapter."""

    provider = Provider.OPENAI
    default_model = "gpt-4o-mini"

    def build_request(self, api_key: str, model: str, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{settings.openai_base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
        }
        return url, headers, payload

    def extract_text(self, data: Any) -> str:
        message = _get(_first(_get(data, "choices")), "message")
        content = _get(message, "content")
        return content if isinstance(content, str) else ""


# ---------------------------------------------------------------------------
# Anthropic Adapter
# ---------------------------------------------------------------------------


class AnthropicAdapter(BaseProviderAdapter):
    """Anthropic Messages API adapter."""

    provider = Provider.ANTHROPIC
    default_model = "claude-3-5-sonnet-latest"

    def build_request(self, api_key: str, model: str, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{settings.anthropic_base_url.rstrip('/')}/messages"
        headers = {
            "x-api-key": api_key,
            "anthropic-version": settings.anthropic_version,
            "Content-Type": "application/json",
        }
        payload = {
            "model": model,
            "max_tokens": settings.anthropic_max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        return url, headers, payload

    def extract_text(self, data: Any) -> str:
        text = _get(_first(_get(data, "content")), "text")
        return text if isinstance(text, str) else ""


# ---------------------------------------------------------------------------
# Gemini Adapter
# ---------------------------------------------------------------------------


class GeminiAdapter(BaseProviderAdapter):
    """Google Gemini generateContent adapter."""

    provider = Provider.GEMINI
    default_model = "gemini-1.5-pro-latest"

    def build_request(self, api_key: str, model: str, prompt: str) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{settings.gemini_base_url.rstrip('/')}/models/{quote(model, safe='')}:generateContent"
        headers = {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        return url, headers, payload

    def extract_text(self, data: Any) -> str:
        content = _get(_first(_get(data, "candidates")), "content")
        parts = _get(content, "parts")
        if not isinstance(parts, list):
            return ""
        text_parts = [_get(p, "text") for p in parts]
        return "".join(t for t in text_parts if isinstance(t, str))


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[Provider, type[BaseProviderAdapter]] = {
    Provider.OPENAI: OpenAIAdapter,
    Provider.ANTHROPIC: AnthropicAdapter,
    Provider.GEMINI: GeminiAdapter,
}


def get_adapter(provider: Provider, **kwargs) -> BaseProviderAdapter:
    """Factory: get the appropriate adapter for a provider."""
    cls = ADAPTER_REGISTRY.get(provider)
    if cls is None:
        raise ValueError(f"No adapter registered for provider: {provider}")
    return cls(**kwargs)


def default_model_for(provider: Provider) -> str:
    return ADAPTER_REGISTRY[provider].default_model

"""Core types for the fan-out engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Returned in place of text when a provider answers 2xx without any completion text
NO_CONTENT = "[no content]"

# Only one credential slot per provider exists today ("openai-1", ...)
DEFAULT_SLOT = 1


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Provider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[Provider, str] = {
    Provider.OPENAI: "OpenAI",
    Provider.ANTHROPIC: "Anthropic",
    Provider.GEMINI: "Gemini",
}


# ---------------------------------------------------------------------------
# Accounts & credentials
# ---------------------------------------------------------------------------


def make_account_id(provider: Provider, slot: int = DEFAULT_SLOT) -> str:
    return f"{provider.value}-{slot}"


def parse_account_id(account_id: str) -> tuple[Provider, int] | None:
    """Split ``"openai-1"`` into ``(Provider.OPENAI, 1)``.

    Returns None for anything that does not name a known provider and a
    known slot. The slot must be written in canonical ASCII form, so
    ``"openai-01"`` is not slot 1.
    """
    if not isinstance(account_id, str):
        return None
    name, sep, slot = account_id.rpartition("-")
    if not sep or not (slot.isascii() and slot.isdigit()) or slot != str(int(slot)):
        return None
    try:
        provider = Provider(name)
    except ValueError:
        return None
    if int(slot) != DEFAULT_SLOT:
        return None
    return provider, int(slot)


@dataclass(frozen=True)
class ProviderCredential:
    """Decrypted key + model for one provider. ``api_key`` is None when not configured."""

    api_key: str | None
    model: str


# One resolved credential per provider, keyed by Provider
CredentialBundle = dict[Provider, ProviderCredential]


@dataclass(frozen=True)
class Account:
    """A (provider, credential slot) pair the user can broadcast to."""

    id: str
    provider: Provider
    display_name: str
    model: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "provider": self.provider.value,
            "displayName": self.display_name,
            "model": self.model,
        }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class CallResult:
    """Outcome of one account's call. ``text`` is set iff ok, ``error`` iff not ok."""

    account_id: str
    provider: Provider | None
    ok: bool
    text: str | None = None
    error: str | None = None
    elapsed_ms: int = 0

    @classmethod
    def success(cls, account_id: str, provider: Provider, text: str, elapsed_ms: int) -> CallResult:
        return cls(account_id=account_id, provider=provider, ok=True, text=text, elapsed_ms=elapsed_ms)

    @classmethod
    def failure(cls, account_id: str, provider: Provider | None, error: str, elapsed_ms: int) -> CallResult:
        return cls(account_id=account_id, provider=provider, ok=False, error=error, elapsed_ms=elapsed_ms)

    def to_dict(self) -> dict:
        """Serialize to the JSON shape returned by the API (absent fields omitted)."""
        data: dict = {"accountId": self.account_id}
        if self.provider is not None:
            data["provider"] = self.provider.value
        data["ok"] = self.ok
        if self.ok:
            data["text"] = self.text
        else:
            data["error"] = self.error
        data["elapsedMs"] = self.elapsed_ms
        return data


@dataclass
class FanOutResponse:
    """Envelope returned once every account call has settled."""

    prompt: str
    results: list[CallResult] = field(default_factory=list)
    total_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "results": [r.to_dict() for r in self.results],
            "totalMs": self.total_ms,
        }

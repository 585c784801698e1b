"""Per-provider settings schemas. Keys are write-only: responses only say whether one resolves."""

from pydantic import BaseModel, ConfigDict, Field


class ProviderSettingsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_key: bool = Field(alias="hasKey")  # True if a usable key resolves (user or env)
    model: str


class SettingsResponse(BaseModel):
    openai: ProviderSettingsResponse
    anthropic: ProviderSettingsResponse
    gemini: ProviderSettingsResponse


class ProviderSettingsUpdate(BaseModel):
    """Omitted field: untouched. Empty string or null: cleared."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    api_key: str | None = Field(default=None, alias="apiKey", max_length=512)
    model: str | None = Field(default=None, max_length=200)


class SettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    openai: ProviderSettingsUpdate | None = None
    anthropic: ProviderSettingsUpdate | None = None
    gemini: ProviderSettingsUpdate | None = None

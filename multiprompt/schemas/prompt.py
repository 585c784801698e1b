"""Fan-out request/response schemas (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict, Field


class PromptRequest(BaseModel):
    # Both optional here so that missing values reach the dispatcher's own validation
    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = None
    account_ids: list[str] | None = Field(default=None, alias="accountIds")


class CallResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(alias="accountId")
    provider: str | None = None
    ok: bool
    text: str | None = None
    error: str | None = None
    elapsed_ms: int = Field(alias="elapsedMs", ge=0)


class PromptResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    results: list[CallResultResponse]
    total_ms: int = Field(alias="totalMs", ge=0)

from pydantic import BaseModel, ConfigDict, Field


class AccountResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    provider: str
    display_name: str = Field(alias="displayName")
    model: str


class AccountsResponse(BaseModel):
    accounts: list[AccountResponse]

from uuid import UUID

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=128)


class UserInfo(BaseModel):
    id: UUID
    username: str

    model_config = {"from_attributes": True}


class MeResponse(BaseModel):
    user: UserInfo

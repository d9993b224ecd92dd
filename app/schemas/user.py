from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    username: str = Field("", max_length=64)
    password: str = Field("", max_length=128)


class UserRead(BaseModel):
    id: UUID
    username: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class UserSummary(BaseModel):
    id: UUID
    username: str


class UserCreatedResponse(BaseModel):
    message: str
    user: UserSummary

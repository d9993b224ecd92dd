from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class BranchBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = ""
    is_active: bool = True


class BranchCreate(BranchBase):
    pass


class BranchUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    address: str | None = None
    is_active: bool | None = None


class BranchRead(BranchBase):
    id: UUID
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class BranchSeedResult(BaseModel):
    action: Literal["created", "exists"]
    sucursal: str


class BranchSeedSummaryItem(BaseModel):
    nombre: str
    activa: bool


class BranchSeedResponse(BaseModel):
    """Report returned by the default-branch seed."""
    message: str
    results: list[BranchSeedResult]
    total_sucursales: int
    sucursales: list[BranchSeedSummaryItem]

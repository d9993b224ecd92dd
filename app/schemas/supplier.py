from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.supplier import SupplierStatus


class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = ""
    status: SupplierStatus = SupplierStatus.ACTIVE
    additional_info: str = ""
    must_issue_invoice_a: bool = False


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    phone: str | None = None
    status: SupplierStatus | None = None
    additional_info: str | None = None
    must_issue_invoice_a: bool | None = None


class SupplierRead(SupplierBase):
    id: UUID
    created_at: datetime | None = None

    model_config = {"from_attributes": True}

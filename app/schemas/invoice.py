from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.invoice import DocumentType, InvoiceStatus, PaymentMethod
from app.schemas.common import MAX_MONEY, Money


class PaymentEntryRead(BaseModel):
    payment_date: date
    amount: Money
    payment_method: PaymentMethod

    model_config = {"from_attributes": True}


class InvoiceBase(BaseModel):
    invoice_external_id: str = Field(..., min_length=1)
    supplier_id: UUID
    branch_id: UUID
    document_date: date
    received_date: date
    document_type: DocumentType
    description: str = ""
    total_amount: Money = Field(..., ge=0, le=MAX_MONEY)


class InvoiceCreate(InvoiceBase):
    pass


class InvoiceUpdate(BaseModel):
    """Partial edit. amount_paid here overwrites the running total, it is not a payment."""
    invoice_external_id: str | None = Field(None, min_length=1)
    supplier_id: UUID | None = None
    branch_id: UUID | None = None
    document_date: date | None = None
    received_date: date | None = None
    document_type: DocumentType | None = None
    description: str | None = None
    total_amount: Money | None = Field(None, ge=0, le=MAX_MONEY)
    amount_paid: Money | None = Field(None, ge=0, le=MAX_MONEY)


class PaymentApply(BaseModel):
    # Optional at the schema level so a missing field gets the combined 400 message.
    amount: Decimal | None = Field(None, le=MAX_MONEY)
    payment_date: date | None = None
    payment_method: PaymentMethod | None = None


class InvoiceRead(BaseModel):
    id: UUID
    invoice_external_id: str
    supplier_id: UUID
    supplier_name: str
    branch_id: UUID
    branch_name: str
    document_date: date
    received_date: date
    document_type: DocumentType
    description: str
    total_amount: Money
    amount_paid: Money
    remaining_balance: Money
    status: InvoiceStatus
    payment_history: list[PaymentEntryRead] = Field(default_factory=list)
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class InvoiceDeletedResponse(BaseModel):
    message: str
    deleted_payment: InvoiceRead


class InvoiceTotals(BaseModel):
    total_invoices: int
    total_amount: Money
    amount_paid: Money
    remaining_balance: Money


HistoryPeriod = Literal["all", "week", "month", "quarter"]


class HistoryStats(BaseModel):
    total_invoices: int
    paid_count: int
    partially_paid_count: int
    unpaid_count: int
    total_paid: Money
    total_pending: Money


class HistoryResponse(BaseModel):
    period: HistoryPeriod
    stats: HistoryStats
    invoices: list[InvoiceRead]

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class DocumentType(str, enum.Enum):
    INVOICE_A = "Factura A"
    INVOICE_B = "Factura B"
    INVOICE_C = "Factura C"
    DELIVERY_NOTE = "Remito"


class InvoiceStatus(str, enum.Enum):
    UNPAID = "Pendiente"
    PARTIALLY_PAID = "Parcialmente Pagado"
    PAID = "Pagado"


class PaymentMethod(str, enum.Enum):
    CASH = "Efectivo"
    MERCADO_PAGO = "Mercado Pago"
    BBVA = "BBVA"
    BANK_TRANSFER = "Transferencia bancaria"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Invoice(Base):
    """
    A supplier invoice (or delivery note) payable by one branch.
    Supplier and branch names are copied in at creation so listings need no join;
    the ids are plain references checked by the application, not foreign keys.
    """

    __tablename__ = "invoices"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_external_id: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    supplier_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    supplier_name: Mapped[str] = mapped_column(String(256))
    branch_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    branch_name: Mapped[str] = mapped_column(String(128))
    document_date: Mapped[date] = mapped_column(Date)
    received_date: Mapped[date] = mapped_column(Date)
    document_type: Mapped[DocumentType] = mapped_column(Enum(DocumentType, name="document_type"), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0"))
    remaining_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus, name="invoice_status"), default=InvoiceStatus.UNPAID, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)

    payment_history: Mapped[list["InvoicePayment"]] = relationship(
        "InvoicePayment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoicePayment.sequence",
        lazy="selectin",
    )


class InvoicePayment(Base):
    """One payment applied to an invoice. Rows are only ever appended."""

    __tablename__ = "invoice_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invoice_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("invoices.id", ondelete="CASCADE"), index=True)
    sequence: Mapped[int] = mapped_column(Integer)
    payment_date: Mapped[date] = mapped_column(Date)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod, name="payment_method"))

    invoice: Mapped["Invoice"] = relationship("Invoice", back_populates="payment_history")

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class SupplierStatus(str, enum.Enum):
    ACTIVE = "Activo"
    INACTIVE = "Inactivo"


class Supplier(Base):
    """A vendor that sends invoices or delivery notes to the branches."""

    __tablename__ = "suppliers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(256), index=True)
    phone: Mapped[str] = mapped_column(String(64), default="")
    status: Mapped[SupplierStatus] = mapped_column(
        Enum(SupplierStatus, name="supplier_status"), default=SupplierStatus.ACTIVE, index=True
    )
    additional_info: Mapped[str] = mapped_column(Text, default="")
    # Supplier is expected to bill with "Factura A"; anything sent as "Remito" is a discrepancy.
    must_issue_invoice_a: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

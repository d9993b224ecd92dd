"""
Invoice ledger: invoice lifecycle, payment application and the
supplier/document-type discrepancy rule.

Reads and writes are a plain read-modify-write on one session; two payments
posted at the same time against one invoice can still lose an update.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.models.branch import Branch
from app.models.invoice import DocumentType, Invoice, InvoicePayment, InvoiceStatus
from app.models.supplier import Supplier
from app.schemas.common import MAX_MONEY
from app.schemas.invoice import (
    HistoryPeriod,
    HistoryStats,
    InvoiceCreate,
    InvoiceTotals,
    InvoiceUpdate,
    PaymentApply,
)

logger = logging.getLogger("app.ledger")

ZERO = Decimal("0")
CENT = Decimal("0.01")

HISTORY_WINDOWS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "quarter": timedelta(days=90),
}


def _money(value) -> Decimal:
    try:
        amount = Decimal(value if value is not None else 0).quantize(CENT)
    except InvalidOperation as e:
        raise ValidationError("Monto fuera de rango") from e
    if abs(amount) > MAX_MONEY:
        raise ValidationError("Monto fuera de rango")
    return amount


def derive_status(total_amount: Decimal, amount_paid: Decimal) -> InvoiceStatus:
    if amount_paid == 0:
        return InvoiceStatus.UNPAID
    if amount_paid >= total_amount:
        return InvoiceStatus.PAID
    return InvoiceStatus.PARTIALLY_PAID


def remaining_balance(total_amount: Decimal, amount_paid: Decimal) -> Decimal:
    """Balance floored at zero; overpayment is accepted but never shows as negative."""
    return max(total_amount - amount_paid, ZERO)


def apply_totals(invoice: Invoice) -> None:
    """Recompute the derived fields from total_amount / amount_paid."""
    total = _money(invoice.total_amount)
    paid = _money(invoice.amount_paid)
    invoice.remaining_balance = remaining_balance(total, paid)
    invoice.status = derive_status(total, paid)


def find_discrepancies(invoices: Iterable[Invoice], suppliers: Iterable[Supplier]) -> list[Invoice]:
    """Invoices sent as a delivery note by a supplier that must bill with Factura A."""
    must_invoice = {s.id for s in suppliers if s.must_issue_invoice_a}
    return [
        inv
        for inv in invoices
        if inv.supplier_id in must_invoice and inv.document_type == DocumentType.DELIVERY_NOTE
    ]


def summarize(invoices: Iterable[Invoice]) -> InvoiceTotals:
    rows = list(invoices)
    return InvoiceTotals(
        total_invoices=len(rows),
        total_amount=sum((_money(r.total_amount) for r in rows), ZERO),
        amount_paid=sum((_money(r.amount_paid) for r in rows), ZERO),
        remaining_balance=sum((_money(r.remaining_balance) for r in rows), ZERO),
    )


def history_stats(invoices: Iterable[Invoice]) -> HistoryStats:
    rows = list(invoices)
    paid = [r for r in rows if r.status == InvoiceStatus.PAID]
    partial = [r for r in rows if r.status == InvoiceStatus.PARTIALLY_PAID]
    unpaid = [r for r in rows if r.status == InvoiceStatus.UNPAID]
    return HistoryStats(
        total_invoices=len(rows),
        paid_count=len(paid),
        partially_paid_count=len(partial),
        unpaid_count=len(unpaid),
        total_paid=sum((_money(r.amount_paid) for r in paid + partial), ZERO),
        total_pending=sum((_money(r.remaining_balance) for r in unpaid + partial), ZERO),
    )


def _matches_search(search: str):
    term = f"%{search.strip()}%"
    return or_(
        Invoice.supplier_name.ilike(term),
        Invoice.invoice_external_id.ilike(term),
        Invoice.description.ilike(term),
        Invoice.branch_name.ilike(term),
    )


@dataclass
class InvoiceFilters:
    search: str | None = None
    status: InvoiceStatus | None = None
    document_type: DocumentType | None = None
    branch_id: UUID | None = None
    discrepancies_only: bool = False


class InvoiceLedger:
    def __init__(self, db: Session):
        self.db = db

    def get(self, invoice_id: UUID) -> Invoice:
        invoice = self.db.get(Invoice, invoice_id)
        if not invoice:
            raise NotFoundError("Payment not found")
        return invoice

    def list_invoices(self, filters: InvoiceFilters | None = None) -> list[Invoice]:
        filters = filters or InvoiceFilters()
        q = select(Invoice).order_by(Invoice.created_at.desc())
        if filters.search and filters.search.strip():
            q = q.where(_matches_search(filters.search))
        if filters.status is not None:
            q = q.where(Invoice.status == filters.status)
        if filters.document_type is not None:
            q = q.where(Invoice.document_type == filters.document_type)
        if filters.branch_id is not None:
            q = q.where(Invoice.branch_id == filters.branch_id)
        rows = list(self.db.execute(q).scalars().all())
        if filters.discrepancies_only:
            flagged = {inv.id for inv in self.discrepancies()}
            rows = [r for r in rows if r.id in flagged]
        return rows

    def history(self, period: HistoryPeriod = "all", search: str | None = None) -> tuple[HistoryStats, list[Invoice]]:
        stats = history_stats(self.db.execute(select(Invoice)).scalars().all())
        q = select(Invoice).order_by(Invoice.created_at.desc())
        window = HISTORY_WINDOWS.get(period)
        if window is not None:
            q = q.where(Invoice.created_at >= datetime.now(timezone.utc) - window)
        if search and search.strip():
            q = q.where(_matches_search(search))
        return stats, list(self.db.execute(q).scalars().all())

    def discrepancies(self) -> list[Invoice]:
        invoices = self.db.execute(select(Invoice).order_by(Invoice.created_at.desc())).scalars().all()
        suppliers = self.db.execute(select(Supplier).where(Supplier.must_issue_invoice_a.is_(True))).scalars().all()
        return find_discrepancies(invoices, suppliers)

    def count_for_branch(self, branch_id: UUID) -> int:
        return int(self.db.execute(select(func.count(Invoice.id)).where(Invoice.branch_id == branch_id)).scalar() or 0)

    def _supplier(self, supplier_id: UUID) -> Supplier:
        supplier = self.db.get(Supplier, supplier_id)
        if not supplier:
            raise NotFoundError("Supplier not found")
        return supplier

    def _branch(self, branch_id: UUID) -> Branch:
        branch = self.db.get(Branch, branch_id)
        if not branch:
            raise NotFoundError("Sucursal not found")
        return branch

    def _ensure_unique_external_id(self, external_id: str, exclude: UUID | None = None) -> None:
        q = select(Invoice.id).where(Invoice.invoice_external_id == external_id)
        if exclude is not None:
            q = q.where(Invoice.id != exclude)
        if self.db.execute(q).first():
            raise ConflictError(f"Ya existe una factura con el número {external_id}")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Ya existe una factura con ese número") from e

    def create(self, payload: InvoiceCreate) -> Invoice:
        supplier = self._supplier(payload.supplier_id)
        branch = self._branch(payload.branch_id)
        external_id = payload.invoice_external_id.strip()
        if not external_id:
            raise ValidationError("Invoice number is required")
        self._ensure_unique_external_id(external_id)

        total = _money(payload.total_amount)
        invoice = Invoice(
            invoice_external_id=external_id,
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            branch_id=branch.id,
            branch_name=branch.name,
            document_date=payload.document_date,
            received_date=payload.received_date,
            document_type=payload.document_type,
            description=(payload.description or "").strip(),
            total_amount=total,
            amount_paid=ZERO,
            remaining_balance=total,
            status=InvoiceStatus.UNPAID,
        )
        self.db.add(invoice)
        self._commit()
        self.db.refresh(invoice)
        logger.info("invoice_created id=%s number=%s total=%s", invoice.id, invoice.invoice_external_id, total)
        return invoice

    def apply_payment(self, invoice_id: UUID, payload: PaymentApply) -> Invoice:
        if not payload.amount or payload.payment_date is None or payload.payment_method is None:
            raise ValidationError("Monto, fecha de pago y forma de pago son requeridos")
        amount = _money(payload.amount)
        if amount <= 0:
            raise ValidationError("El monto debe ser mayor a cero")
        invoice = self.get(invoice_id)
        new_paid = _money(_money(invoice.amount_paid) + amount)

        invoice.payment_history.append(
            InvoicePayment(
                sequence=len(invoice.payment_history),
                payment_date=payload.payment_date,
                amount=amount,
                payment_method=payload.payment_method,
            )
        )
        invoice.amount_paid = new_paid
        apply_totals(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(
            "payment_applied id=%s amount=%s paid=%s balance=%s status=%s",
            invoice.id,
            amount,
            invoice.amount_paid,
            invoice.remaining_balance,
            invoice.status.value,
        )
        return invoice

    def update(self, invoice_id: UUID, payload: InvoiceUpdate) -> Invoice:
        invoice = self.get(invoice_id)
        if payload.invoice_external_id is not None:
            external_id = payload.invoice_external_id.strip()
            if not external_id:
                raise ValidationError("Invoice number is required")
            self._ensure_unique_external_id(external_id, exclude=invoice.id)
            invoice.invoice_external_id = external_id
        if payload.supplier_id is not None:
            supplier = self._supplier(payload.supplier_id)
            invoice.supplier_id = supplier.id
            invoice.supplier_name = supplier.name
        if payload.branch_id is not None:
            branch = self._branch(payload.branch_id)
            invoice.branch_id = branch.id
            invoice.branch_name = branch.name
        if payload.document_date is not None:
            invoice.document_date = payload.document_date
        if payload.received_date is not None:
            invoice.received_date = payload.received_date
        if payload.document_type is not None:
            invoice.document_type = payload.document_type
        if payload.description is not None:
            invoice.description = payload.description.strip()
        if payload.total_amount is not None:
            invoice.total_amount = _money(payload.total_amount)
        if payload.amount_paid is not None:
            # overwrite, may move backwards
            invoice.amount_paid = _money(payload.amount_paid)
        apply_totals(invoice)
        self._commit()
        self.db.refresh(invoice)
        logger.info("invoice_updated id=%s status=%s", invoice.id, invoice.status.value)
        return invoice

    def delete(self, invoice_id: UUID) -> Invoice:
        invoice = self.get(invoice_id)
        self.db.delete(invoice)
        self.db.commit()
        logger.info("invoice_deleted id=%s number=%s", invoice.id, invoice.invoice_external_id)
        return invoice

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.invoice import DocumentType, InvoiceStatus
from app.schemas.invoice import (
    HistoryPeriod,
    HistoryResponse,
    InvoiceCreate,
    InvoiceDeletedResponse,
    InvoiceRead,
    InvoiceTotals,
    InvoiceUpdate,
    PaymentApply,
)
from app.services.invoice_pdf import render_invoice_pdf
from app.services.ledger import InvoiceFilters, InvoiceLedger, summarize

router = APIRouter(prefix="/payments", tags=["payments"])


def invoice_filters(
    search: str | None = Query(None, description="Supplier, invoice number, description or branch"),
    status: InvoiceStatus | None = Query(None),
    document_type: DocumentType | None = Query(None),
    branch_id: UUID | None = Query(None),
    discrepancies_only: bool = Query(False),
) -> InvoiceFilters:
    return InvoiceFilters(
        search=search,
        status=status,
        document_type=document_type,
        branch_id=branch_id,
        discrepancies_only=discrepancies_only,
    )


@router.get("", response_model=list[InvoiceRead])
def list_payments(
    filters: InvoiceFilters = Depends(invoice_filters),
    db: Session = Depends(get_db),
) -> list[InvoiceRead]:
    return [InvoiceRead.model_validate(r) for r in InvoiceLedger(db).list_invoices(filters)]


@router.get("/summary", response_model=InvoiceTotals)
def payments_summary(
    filters: InvoiceFilters = Depends(invoice_filters),
    db: Session = Depends(get_db),
) -> InvoiceTotals:
    return summarize(InvoiceLedger(db).list_invoices(filters))


@router.get("/discrepancies", response_model=list[InvoiceRead])
def list_discrepancies(db: Session = Depends(get_db)) -> list[InvoiceRead]:
    """Delivery notes received from suppliers that must bill with Factura A."""
    return [InvoiceRead.model_validate(r) for r in InvoiceLedger(db).discrepancies()]


@router.get("/history", response_model=HistoryResponse)
def payments_history(
    period: HistoryPeriod = Query("all"),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
) -> HistoryResponse:
    stats, rows = InvoiceLedger(db).history(period, search)
    return HistoryResponse(period=period, stats=stats, invoices=[InvoiceRead.model_validate(r) for r in rows])


@router.post("", response_model=InvoiceRead, status_code=201)
def create_payment(payload: InvoiceCreate, db: Session = Depends(get_db)) -> InvoiceRead:
    return InvoiceRead.model_validate(InvoiceLedger(db).create(payload))


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_payment(invoice_id: UUID, db: Session = Depends(get_db)) -> InvoiceRead:
    return InvoiceRead.model_validate(InvoiceLedger(db).get(invoice_id))


@router.put("/{invoice_id}", response_model=InvoiceRead)
def update_payment(invoice_id: UUID, payload: InvoiceUpdate, db: Session = Depends(get_db)) -> InvoiceRead:
    return InvoiceRead.model_validate(InvoiceLedger(db).update(invoice_id, payload))


@router.delete("/{invoice_id}", response_model=InvoiceDeletedResponse)
def delete_payment(invoice_id: UUID, db: Session = Depends(get_db)) -> InvoiceDeletedResponse:
    deleted = InvoiceLedger(db).delete(invoice_id)
    return InvoiceDeletedResponse(
        message="Payment deleted successfully",
        deleted_payment=InvoiceRead.model_validate(deleted),
    )


@router.post("/{invoice_id}/pay", response_model=InvoiceRead)
def pay(invoice_id: UUID, payload: PaymentApply, db: Session = Depends(get_db)) -> InvoiceRead:
    return InvoiceRead.model_validate(InvoiceLedger(db).apply_payment(invoice_id, payload))


@router.get("/{invoice_id}/pdf")
def payment_pdf(invoice_id: UUID, db: Session = Depends(get_db)) -> Response:
    inv = InvoiceLedger(db).get(invoice_id)
    headers = {"Content-Disposition": f'inline; filename="factura-{inv.invoice_external_id}.pdf"'}
    return Response(content=render_invoice_pdf(inv), media_type="application/pdf", headers=headers)

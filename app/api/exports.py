from __future__ import annotations

import csv
import io
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from openpyxl import Workbook
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.ledger import InvoiceLedger

router = APIRouter(prefix="/exports", tags=["exports"])

HEADER = [
    "invoice_id",
    "invoice_number",
    "supplier",
    "branch",
    "document_type",
    "document_date",
    "received_date",
    "total_amount",
    "amount_paid",
    "remaining_balance",
    "status",
    "payments",
    "description",
]


def _rows(db: Session) -> list[list]:
    rows: list[list] = []
    for inv in InvoiceLedger(db).list_invoices():
        rows.append([
            str(inv.id),
            inv.invoice_external_id,
            inv.supplier_name,
            inv.branch_name,
            inv.document_type.value,
            inv.document_date.isoformat(),
            inv.received_date.isoformat(),
            float(inv.total_amount),
            float(inv.amount_paid),
            float(inv.remaining_balance),
            inv.status.value,
            len(inv.payment_history),
            inv.description or "",
        ])
    return rows


@router.get("/payments.csv")
def export_payments_csv(db: Session = Depends(get_db)) -> Response:
    out = io.StringIO()
    w = csv.writer(out)
    w.writerow(HEADER)
    for r in _rows(db):
        w.writerow(r)
    headers = {"Content-Disposition": f'attachment; filename="facturas-{date.today().isoformat()}.csv"'}
    return Response(content=out.getvalue().encode("utf-8"), media_type="text/csv", headers=headers)


@router.get("/payments.xlsx")
def export_payments_xlsx(db: Session = Depends(get_db)) -> Response:
    wb = Workbook()
    ws = wb.active
    ws.title = "Facturas"
    ws.append(HEADER)
    for r in _rows(db):
        ws.append(r)
    bio = io.BytesIO()
    wb.save(bio)
    headers = {"Content-Disposition": f'attachment; filename="facturas-{date.today().isoformat()}.xlsx"'}
    return Response(
        content=bio.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )

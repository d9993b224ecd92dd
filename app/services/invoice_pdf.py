from __future__ import annotations

import io
from decimal import Decimal

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from app.models.invoice import Invoice, InvoiceStatus

MAX_HISTORY_ROWS = 12


def _fmt(amount: Decimal | None) -> str:
    return f"$ {Decimal(amount or 0):,.2f}"


def render_invoice_pdf(inv: Invoice) -> bytes:
    """One-page summary of an invoice and its payments."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    page_w, page_h = A4
    margin = 16 * mm
    primary = colors.HexColor("#0f766e")
    ink = colors.HexColor("#0f172a")
    muted = colors.HexColor("#475569")
    soft = colors.HexColor("#e2e8f0")

    # Header band
    c.setFillColor(primary)
    c.roundRect(margin, page_h - 50 * mm, page_w - (2 * margin), 34 * mm, 7, fill=1, stroke=0)
    c.setFillColor(colors.white)
    c.setFont("Helvetica-Bold", 22)
    c.drawString(margin + 8 * mm, page_h - 31 * mm, inv.document_type.value.upper())
    c.setFont("Helvetica", 10)
    c.drawString(margin + 8 * mm, page_h - 37 * mm, f"Sucursal {inv.branch_name}")

    c.setFont("Helvetica-Bold", 12)
    c.drawRightString(page_w - margin - 8 * mm, page_h - 28 * mm, f"No. {inv.invoice_external_id}")
    c.setFont("Helvetica", 10)
    c.drawRightString(page_w - margin - 8 * mm, page_h - 34 * mm, f"Estado: {inv.status.value}")

    # Meta cards
    card_y = page_h - 90 * mm
    card_h = 30 * mm
    card_w = (page_w - (2 * margin) - 8 * mm) / 2
    c.setFillColor(colors.white)
    c.setStrokeColor(soft)
    c.roundRect(margin, card_y, card_w, card_h, 6, fill=1, stroke=1)
    c.roundRect(margin + card_w + 8 * mm, card_y, card_w, card_h, 6, fill=1, stroke=1)

    c.setFillColor(muted)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(margin + 5 * mm, card_y + card_h - 8 * mm, "Proveedor")
    c.setFillColor(ink)
    c.setFont("Helvetica", 11)
    c.drawString(margin + 5 * mm, card_y + card_h - 15 * mm, (inv.supplier_name or "-")[:60])
    c.setFont("Helvetica", 9)
    c.setFillColor(muted)
    c.drawString(margin + 5 * mm, card_y + card_h - 21 * mm, (inv.description or "")[:70])

    rx = margin + card_w + 8 * mm
    c.setFillColor(muted)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(rx + 5 * mm, card_y + card_h - 8 * mm, "Fechas")
    c.setFillColor(ink)
    c.setFont("Helvetica", 10)
    c.drawString(rx + 5 * mm, card_y + card_h - 15 * mm, f"Remito: {inv.document_date.isoformat()}")
    c.drawString(rx + 5 * mm, card_y + card_h - 21 * mm, f"Recepción: {inv.received_date.isoformat()}")

    # Payment history table
    history = list(inv.payment_history or [])
    visible_rows = history[:MAX_HISTORY_ROWS]
    row_h = 8 * mm
    table_h = (10 * mm) + (max(len(visible_rows), 1) * row_h) + (4 * mm)
    table_y = card_y - 12 * mm - table_h
    table_left = margin + 5 * mm
    table_right = page_w - margin - 5 * mm
    method_left = margin + 50 * mm
    c.setStrokeColor(soft)
    c.roundRect(margin, table_y, page_w - (2 * margin), table_h, 6, fill=0, stroke=1)
    c.setFillColor(colors.HexColor("#f8fafc"))
    c.roundRect(margin, table_y + table_h - 10 * mm, page_w - (2 * margin), 10 * mm, 6, fill=1, stroke=0)
    c.setFillColor(ink)
    c.setFont("Helvetica-Bold", 10)
    c.drawString(table_left, table_y + table_h - 6.8 * mm, "Fecha de pago")
    c.drawString(method_left, table_y + table_h - 6.8 * mm, "Forma de pago")
    c.drawRightString(table_right, table_y + table_h - 6.8 * mm, "Monto")

    c.setFont("Helvetica", 9.5)
    y = table_y + table_h - 15 * mm
    if not visible_rows:
        c.setFillColor(muted)
        c.drawString(table_left, y, "Sin pagos registrados")
    for row in visible_rows:
        c.drawString(table_left, y, row.payment_date.isoformat())
        c.drawString(method_left, y, row.payment_method.value)
        c.drawRightString(table_right, y, _fmt(row.amount))
        y -= row_h
    if len(history) > len(visible_rows):
        c.setFont("Helvetica-Oblique", 8.5)
        c.setFillColor(muted)
        c.drawString(table_left, table_y + 2.5 * mm, f"+ {len(history) - len(visible_rows)} pagos más")

    # Totals box
    total_w = 74 * mm
    total_h = 26 * mm
    total_x = page_w - margin - total_w
    total_y = table_y - 10 * mm - total_h
    c.setFillColor(colors.HexColor("#f0fdfa"))
    c.setStrokeColor(soft)
    c.roundRect(total_x, total_y, total_w, total_h, 6, fill=1, stroke=1)
    c.setFont("Helvetica", 9.5)
    c.setFillColor(muted)
    c.drawString(total_x + 5 * mm, total_y + 19 * mm, "Total")
    c.drawRightString(total_x + total_w - 5 * mm, total_y + 19 * mm, _fmt(inv.total_amount))
    c.drawString(total_x + 5 * mm, total_y + 13 * mm, "Pagado")
    c.drawRightString(total_x + total_w - 5 * mm, total_y + 13 * mm, _fmt(inv.amount_paid))
    c.setFillColor(primary if inv.status == InvoiceStatus.PAID else ink)
    c.setFont("Helvetica-Bold", 12)
    c.drawString(total_x + 5 * mm, total_y + 5 * mm, "SALDO")
    c.drawRightString(total_x + total_w - 5 * mm, total_y + 5 * mm, _fmt(inv.remaining_balance))

    # Footer
    c.setFillColor(muted)
    c.setFont("Helvetica", 8.5)
    c.drawRightString(page_w - margin, 15 * mm, f"ID: {inv.id}")
    c.showPage()
    c.save()
    return buf.getvalue()

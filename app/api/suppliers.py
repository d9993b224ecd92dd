from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.db.session import get_db
from app.models.supplier import Supplier, SupplierStatus
from app.schemas.common import MessageResponse
from app.schemas.supplier import SupplierCreate, SupplierRead, SupplierUpdate

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


def _get_supplier(db: Session, supplier_id: UUID) -> Supplier:
    supplier = db.get(Supplier, supplier_id)
    if not supplier:
        raise NotFoundError("Supplier not found")
    return supplier


@router.get("", response_model=list[SupplierRead])
def list_suppliers(
    search: str | None = Query(None, description="Filter by name (substring, case-insensitive)"),
    status: SupplierStatus | None = Query(None),
    db: Session = Depends(get_db),
) -> list[SupplierRead]:
    q = select(Supplier).order_by(Supplier.created_at.desc())
    if search and search.strip():
        q = q.where(Supplier.name.ilike(f"%{search.strip()}%"))
    if status is not None:
        q = q.where(Supplier.status == status)
    return [SupplierRead.model_validate(s) for s in db.execute(q).scalars().all()]


@router.post("", response_model=SupplierRead, status_code=201)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)) -> SupplierRead:
    name = payload.name.strip()
    if not name:
        raise ValidationError("Please provide a supplier name")
    supplier = Supplier(
        name=name,
        phone=payload.phone.strip(),
        status=payload.status,
        additional_info=payload.additional_info,
        must_issue_invoice_a=payload.must_issue_invoice_a,
    )
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return SupplierRead.model_validate(supplier)


@router.put("/{supplier_id}", response_model=SupplierRead)
def update_supplier(supplier_id: UUID, payload: SupplierUpdate, db: Session = Depends(get_db)) -> SupplierRead:
    supplier = _get_supplier(db, supplier_id)
    if payload.name is not None:
        name = payload.name.strip()
        if not name:
            raise ValidationError("Please provide a supplier name")
        supplier.name = name
    if payload.phone is not None:
        supplier.phone = payload.phone.strip()
    if payload.status is not None:
        supplier.status = payload.status
    if payload.additional_info is not None:
        supplier.additional_info = payload.additional_info
    if payload.must_issue_invoice_a is not None:
        supplier.must_issue_invoice_a = payload.must_issue_invoice_a
    db.commit()
    db.refresh(supplier)
    return SupplierRead.model_validate(supplier)


@router.delete("/{supplier_id}", response_model=MessageResponse)
def delete_supplier(supplier_id: UUID, db: Session = Depends(get_db)) -> MessageResponse:
    supplier = _get_supplier(db, supplier_id)
    db.delete(supplier)
    db.commit()
    return MessageResponse(message="Supplier deleted successfully")

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.seed import seed_default_branches
from app.db.session import get_db
from app.schemas.branch import (
    BranchCreate,
    BranchRead,
    BranchSeedResponse,
    BranchSeedSummaryItem,
    BranchUpdate,
)
from app.schemas.common import MessageResponse
from app.services.branches import BranchDirectory

router = APIRouter(prefix="/sucursales", tags=["sucursales"])


@router.get("", response_model=list[BranchRead])
def list_branches(db: Session = Depends(get_db)) -> list[BranchRead]:
    return [BranchRead.model_validate(b) for b in BranchDirectory(db).list_branches()]


@router.post("", response_model=BranchRead, status_code=201)
def create_branch(payload: BranchCreate, db: Session = Depends(get_db)) -> BranchRead:
    return BranchRead.model_validate(BranchDirectory(db).create(payload))


@router.post("/init", response_model=BranchSeedResponse)
def init_branches(db: Session = Depends(get_db)) -> BranchSeedResponse:
    results = seed_default_branches(db)
    branches = BranchDirectory(db).list_branches()
    return BranchSeedResponse(
        message="Inicialización completada",
        results=results,
        total_sucursales=len(branches),
        sucursales=[BranchSeedSummaryItem(nombre=b.name, activa=b.is_active) for b in branches],
    )


@router.put("/{branch_id}", response_model=BranchRead)
def update_branch(branch_id: UUID, payload: BranchUpdate, db: Session = Depends(get_db)) -> BranchRead:
    return BranchRead.model_validate(BranchDirectory(db).update(branch_id, payload))


@router.delete("/{branch_id}", response_model=MessageResponse)
def delete_branch(branch_id: UUID, db: Session = Depends(get_db)) -> MessageResponse:
    BranchDirectory(db).delete(branch_id)
    return MessageResponse(message="Sucursal deleted successfully")

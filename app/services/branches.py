"""Branch (sucursal) directory: uniqueness, rename cascade and the deletion guard."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from app.models.branch import Branch
from app.models.invoice import Invoice
from app.schemas.branch import BranchCreate, BranchUpdate
from app.services.ledger import InvoiceLedger

logger = logging.getLogger("app.branches")

DUPLICATE_NAME = "Ya existe una sucursal con ese nombre"
MISSING_NAME = "Please provide a sucursal name"


class BranchDirectory:
    def __init__(self, db: Session):
        self.db = db

    def list_branches(self) -> list[Branch]:
        return list(self.db.execute(select(Branch).order_by(Branch.created_at.desc())).scalars().all())

    def get(self, branch_id: UUID) -> Branch:
        branch = self.db.get(Branch, branch_id)
        if not branch:
            raise NotFoundError("Sucursal not found")
        return branch

    def find_by_name(self, name: str) -> Branch | None:
        return self.db.execute(select(Branch).where(Branch.name == name.strip())).scalars().first()

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(DUPLICATE_NAME) from e

    def create(self, payload: BranchCreate) -> Branch:
        name = payload.name.strip()
        if not name:
            raise ValidationError(MISSING_NAME)
        if self.find_by_name(name):
            raise ConflictError(DUPLICATE_NAME)
        branch = Branch(name=name, address=(payload.address or "").strip(), is_active=payload.is_active)
        self.db.add(branch)
        self._commit()
        self.db.refresh(branch)
        return branch

    def update(self, branch_id: UUID, payload: BranchUpdate) -> Branch:
        branch = self.get(branch_id)
        renamed_to: str | None = None
        if payload.name is not None:
            name = payload.name.strip()
            if not name:
                raise ValidationError(MISSING_NAME)
            if name != branch.name:
                other = self.find_by_name(name)
                if other and other.id != branch.id:
                    raise ConflictError(DUPLICATE_NAME)
                branch.name = name
                renamed_to = name
        if payload.address is not None:
            branch.address = payload.address.strip()
        if payload.is_active is not None:
            branch.is_active = payload.is_active
        self._commit()
        if renamed_to is not None:
            # Separate write after the branch commit; a failure here leaves stale branch_name copies.
            touched = self.cascade_rename(branch.id, renamed_to)
            logger.info("branch_renamed id=%s name=%s invoices_updated=%s", branch.id, renamed_to, touched)
        self.db.refresh(branch)
        return branch

    def cascade_rename(self, branch_id: UUID, name: str) -> int:
        try:
            result = self.db.execute(
                update(Invoice)
                .where(Invoice.branch_id == branch_id)
                .values(branch_name=name)
                .execution_options(synchronize_session="fetch")
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("branch_rename_cascade_failed id=%s name=%s", branch_id, name)
            raise InternalError("Sucursal renamed but its invoices could not be updated") from e
        return int(result.rowcount or 0)

    def delete(self, branch_id: UUID) -> Branch:
        branch = self.get(branch_id)
        count = InvoiceLedger(self.db).count_for_branch(branch.id)
        if count > 0:
            logger.info("branch_delete_blocked id=%s invoices=%s", branch.id, count)
            raise ConflictError(
                f"No se puede eliminar la sucursal porque tiene {count} facturas asociadas",
                count=count,
            )
        self.db.delete(branch)
        self.db.commit()
        return branch

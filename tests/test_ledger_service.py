from __future__ import annotations

import unittest
import uuid
from unittest import mock
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from helpers import make_session

from app.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from app.models.branch import Branch
from app.models.invoice import DocumentType, Invoice, InvoiceStatus, PaymentMethod
from app.models.supplier import Supplier
from app.schemas.branch import BranchUpdate
from app.schemas.invoice import InvoiceCreate, InvoiceUpdate, PaymentApply
from app.services.branches import BranchDirectory
from app.services.ledger import InvoiceLedger


class InvoiceLedgerTests(unittest.TestCase):
    def setUp(self):
        self.db = make_session()
        self.supplier = Supplier(name="Lácteos SA", must_issue_invoice_a=True)
        self.branch = Branch(name="Calle 50")
        self.db.add_all([self.supplier, self.branch])
        self.db.commit()
        self.ledger = InvoiceLedger(self.db)

    def tearDown(self):
        self.db.close()

    def _create(self, number="A-1", total=1000, document_type=DocumentType.INVOICE_A, branch=None) -> Invoice:
        return self.ledger.create(
            InvoiceCreate(
                invoice_external_id=number,
                supplier_id=self.supplier.id,
                branch_id=(branch or self.branch).id,
                document_date=date(2026, 10, 1),
                received_date=date(2026, 10, 2),
                document_type=document_type,
                total_amount=Decimal(total),
            )
        )

    def _pay(self, invoice: Invoice, amount) -> Invoice:
        return self.ledger.apply_payment(
            invoice.id,
            PaymentApply(amount=Decimal(amount), payment_date=date(2026, 10, 5), payment_method=PaymentMethod.CASH),
        )

    def test_create_denormalizes_names_and_starts_unpaid(self):
        inv = self._create()
        self.assertEqual(inv.supplier_name, "Lácteos SA")
        self.assertEqual(inv.branch_name, "Calle 50")
        self.assertEqual(inv.amount_paid, Decimal("0"))
        self.assertEqual(inv.remaining_balance, Decimal("1000"))
        self.assertEqual(inv.status, InvoiceStatus.UNPAID)
        self.assertIsNotNone(inv.created_at)

    def test_partial_then_full_payment(self):
        inv = self._create()
        inv = self._pay(inv, 400)
        self.assertEqual(inv.amount_paid, Decimal("400"))
        self.assertEqual(inv.remaining_balance, Decimal("600"))
        self.assertEqual(inv.status, InvoiceStatus.PARTIALLY_PAID)
        inv = self._pay(inv, 600)
        self.assertEqual(inv.amount_paid, Decimal("1000"))
        self.assertEqual(inv.remaining_balance, Decimal("0"))
        self.assertEqual(inv.status, InvoiceStatus.PAID)
        self.assertEqual([p.amount for p in inv.payment_history], [Decimal("400"), Decimal("600")])

    def test_overpayment_is_accepted_and_clamped(self):
        inv = self._pay(self._create(total=100), 150)
        self.assertEqual(inv.amount_paid, Decimal("150"))
        self.assertEqual(inv.remaining_balance, Decimal("0"))
        self.assertEqual(inv.status, InvoiceStatus.PAID)

    def test_payment_validation_and_missing_invoice(self):
        inv = self._create()
        with self.assertRaises(ValidationError):
            self.ledger.apply_payment(inv.id, PaymentApply(amount=Decimal("10")))
        with self.assertRaises(ValidationError):
            self._pay(inv, -5)
        with self.assertRaises(NotFoundError):
            self.ledger.apply_payment(
                uuid.uuid4(),
                PaymentApply(amount=Decimal("10"), payment_date=date(2026, 10, 5), payment_method=PaymentMethod.BBVA),
            )
        self.assertEqual(self.ledger.get(inv.id).payment_history, [])

    def test_running_total_cannot_exceed_column_range(self):
        inv = self._create(total="999999999999.99")
        self._pay(inv, "999999999999.99")
        with self.assertRaises(ValidationError):
            self._pay(inv, "1")
        stored = self.ledger.get(inv.id)
        self.assertEqual(stored.amount_paid, Decimal("999999999999.99"))
        self.assertEqual(len(stored.payment_history), 1)

    def test_create_with_missing_supplier_creates_nothing(self):
        with self.assertRaises(NotFoundError):
            self.ledger.create(
                InvoiceCreate(
                    invoice_external_id="X-1",
                    supplier_id=uuid.uuid4(),
                    branch_id=self.branch.id,
                    document_date=date(2026, 10, 1),
                    received_date=date(2026, 10, 2),
                    document_type=DocumentType.INVOICE_B,
                    total_amount=Decimal("10"),
                )
            )
        self.assertEqual(self.db.execute(select(func.count(Invoice.id))).scalar(), 0)

    def test_duplicate_external_id_is_rejected(self):
        self._create(number="A-1")
        with self.assertRaises(ConflictError):
            self._create(number="A-1")

    def test_update_overwrites_amount_paid_and_recomputes(self):
        inv = self._pay(self._create(), 1000)
        inv = self.ledger.update(inv.id, InvoiceUpdate(amount_paid=Decimal("250")))
        self.assertEqual(inv.amount_paid, Decimal("250"))
        self.assertEqual(inv.remaining_balance, Decimal("750"))
        self.assertEqual(inv.status, InvoiceStatus.PARTIALLY_PAID)

        inv = self.ledger.update(inv.id, InvoiceUpdate(total_amount=Decimal("200"), amount_paid=Decimal("0")))
        self.assertEqual(inv.remaining_balance, Decimal("200"))
        self.assertEqual(inv.status, InvoiceStatus.UNPAID)

    def test_update_total_only_keeps_invariants(self):
        inv = self._pay(self._create(), 400)
        inv = self.ledger.update(inv.id, InvoiceUpdate(total_amount=Decimal("400")))
        self.assertEqual(inv.remaining_balance, Decimal("0"))
        self.assertEqual(inv.status, InvoiceStatus.PAID)

    def test_update_and_delete_missing_invoice(self):
        with self.assertRaises(NotFoundError):
            self.ledger.update(uuid.uuid4(), InvoiceUpdate(description="x"))
        with self.assertRaises(NotFoundError):
            self.ledger.delete(uuid.uuid4())

    def test_delete_removes_invoice(self):
        inv = self._pay(self._create(), 100)
        self.ledger.delete(inv.id)
        with self.assertRaises(NotFoundError):
            self.ledger.get(inv.id)

    def test_discrepancies_from_store(self):
        note = self._create(number="R-1", document_type=DocumentType.DELIVERY_NOTE)
        self._create(number="A-2", document_type=DocumentType.INVOICE_A)
        self.assertEqual([inv.id for inv in self.ledger.discrepancies()], [note.id])


class BranchDirectoryTests(unittest.TestCase):
    def setUp(self):
        self.db = make_session()
        self.supplier = Supplier(name="Panificadora")
        self.db.add(self.supplier)
        self.db.commit()
        self.branches = BranchDirectory(self.db)

    def tearDown(self):
        self.db.close()

    def _invoice_for(self, branch: Branch, number: str) -> Invoice:
        return InvoiceLedger(self.db).create(
            InvoiceCreate(
                invoice_external_id=number,
                supplier_id=self.supplier.id,
                branch_id=branch.id,
                document_date=date(2026, 10, 1),
                received_date=date(2026, 10, 1),
                document_type=DocumentType.INVOICE_C,
                total_amount=Decimal("50"),
            )
        )

    def test_rename_cascades_only_to_own_invoices(self):
        from app.schemas.branch import BranchCreate

        x = self.branches.create(BranchCreate(name="X"))
        other = self.branches.create(BranchCreate(name="Otra"))
        a = self._invoice_for(x, "1")
        b = self._invoice_for(x, "2")
        c = self._invoice_for(other, "3")

        self.branches.update(x.id, BranchUpdate(name="Y"))
        names = {
            inv.id: inv.branch_name
            for inv in self.db.execute(select(Invoice)).scalars().all()
        }
        self.assertEqual(names[a.id], "Y")
        self.assertEqual(names[b.id], "Y")
        self.assertEqual(names[c.id], "Otra")

    def test_blank_name_is_rejected(self):
        from app.schemas.branch import BranchCreate

        with self.assertRaises(ValidationError):
            self.branches.create(BranchCreate(name="   "))
        branch = self.branches.create(BranchCreate(name="Calle 13"))
        with self.assertRaises(ValidationError):
            self.branches.update(branch.id, BranchUpdate(name=" "))
        self.assertEqual(self.db.get(Branch, branch.id).name, "Calle 13")

    def test_failed_rename_cascade_is_an_internal_error(self):
        from app.schemas.branch import BranchCreate

        branch = self.branches.create(BranchCreate(name="X"))
        boom = OperationalError("UPDATE invoices", {}, Exception("connection lost"))
        with mock.patch.object(self.db, "execute", side_effect=boom):
            with self.assertRaises(InternalError) as ctx:
                self.branches.cascade_rename(branch.id, "Y")
        self.assertEqual(ctx.exception.status_code, 500)

    def test_delete_guard_reports_reference_count(self):
        from app.schemas.branch import BranchCreate

        branch = self.branches.create(BranchCreate(name="Cocina"))
        self._invoice_for(branch, "1")
        self._invoice_for(branch, "2")
        with self.assertRaises(ConflictError) as ctx:
            self.branches.delete(branch.id)
        self.assertEqual(ctx.exception.count, 2)
        self.assertIsNotNone(self.db.get(Branch, branch.id))
        self.assertEqual(self.db.execute(select(func.count(Invoice.id))).scalar(), 2)


if __name__ == "__main__":
    unittest.main()

from app.models.branch import Branch
from app.models.invoice import DocumentType, Invoice, InvoicePayment, InvoiceStatus, PaymentMethod
from app.models.supplier import Supplier, SupplierStatus
from app.models.user import User

__all__ = [
    "Branch",
    "DocumentType",
    "Invoice",
    "InvoicePayment",
    "InvoiceStatus",
    "PaymentMethod",
    "Supplier",
    "SupplierStatus",
    "User",
]

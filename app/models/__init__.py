"""SQLAlchemy models for the invoice tracker schema."""

from app.models.base import Base
from app.models.contract import Contract
from app.models.expected_invoice import DismissedExpectedInvoice, ExpectedInvoice
from app.models.invoice import Invoice

__all__ = [
    "Base",
    "Contract",
    "DismissedExpectedInvoice",
    "ExpectedInvoice",
    "Invoice",
]

"""Invoice service for common invoice operations."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.enums import INVOICE_CURRENCIES, Frequency, InvoiceStatus, InvoiceType
from app.core.exceptions import NotFoundError, ValidationError
from app.models.invoice import Invoice
from app.parsing.fields import InvoiceFields
from app.services.base_service import BaseService
from app.services.expected_invoice_service import ExpectedInvoiceService
from app.services.pdf_store import PdfStore
from app.utils.validators import is_iso_date, normalize_key, sanitize_text

logger = logging.getLogger(__name__)

# Columns a manual edit may touch. Anything else in an update payload is rejected.
EDITABLE_FIELDS = frozenset(
    {
        "invoice_number",
        "invoice_date",
        "due_date",
        "client",
        "customer_contract",
        "oracle_contract",
        "po_number",
        "invoice_type",
        "amount_due",
        "currency",
        "status",
        "payment_date",
        "services",
        "frequency",
    }
)
DATE_FIELDS = ("invoice_date", "due_date", "payment_date")
ENUM_FIELDS = {
    "invoice_type": {item.value for item in InvoiceType},
    "frequency": {item.value for item in Frequency},
    "status": {item.value for item in InvoiceStatus},
    "currency": {item.value for item in INVOICE_CURRENCIES},
}


def _number_key(column):
    return func.lower(func.trim(column))


class InvoiceService(BaseService):
    """Service for invoice CRUD, duplicate tracking and payment status."""

    def __init__(self, db: Session | None = None, pdf_store: PdfStore | None = None) -> None:
        super().__init__(db)
        self.pdf_store = pdf_store or PdfStore()

    def list_invoices(self) -> list[Invoice]:
        return self.db.query(Invoice).order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc()).all()

    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        return invoice

    def find_by_number(self, invoice_number: str | None) -> Invoice | None:
        """First invoice whose number matches after trimming and case folding."""
        key = normalize_key(invoice_number)
        if not key:
            return None
        return self.db.query(Invoice).filter(_number_key(Invoice.invoice_number) == key).first()

    def create_from_fields(
        self,
        fields: InvoiceFields,
        pdf_path: str | None,
        pdf_original_name: str | None,
        today: date | None = None,
    ) -> Invoice:
        invoice = Invoice(
            **fields.to_record(),
            status=InvoiceStatus.PENDING.value,
            upload_date=self._today(today).isoformat(),
            pdf_path=pdf_path,
            pdf_original_name=pdf_original_name,
        )
        self.db.add(invoice)
        self.commit()
        self.db.refresh(invoice)
        return invoice

    def replace_fields(
        self,
        invoice: Invoice,
        fields: InvoiceFields,
        pdf_path: str | None,
        pdf_original_name: str | None,
        today: date | None = None,
    ) -> Invoice:
        """Overwrite an invoice with freshly extracted fields, keeping its number and status."""
        record = fields.to_record()
        record.pop("invoice_number")
        for name, value in record.items():
            setattr(invoice, name, value)
        invoice.pdf_path = pdf_path
        invoice.pdf_original_name = pdf_original_name
        invoice.upload_date = self._today(today).isoformat()
        self.commit()
        self.db.refresh(invoice)
        return invoice

    def _validate_updates(self, updates: dict[str, Any]) -> dict[str, Any]:
        unknown = sorted(set(updates) - EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(unknown)}")

        cleaned: dict[str, Any] = {}
        for name, value in updates.items():
            if name in DATE_FIELDS:
                if value in (None, "") and name == "payment_date":
                    cleaned[name] = None
                    continue
                if not is_iso_date(value):
                    raise ValidationError(f"{name} must be a YYYY-MM-DD date")
                cleaned[name] = value
            elif name in ENUM_FIELDS:
                if value not in ENUM_FIELDS[name]:
                    raise ValidationError(f"{name} has unsupported value {value!r}")
                cleaned[name] = value
            elif name == "amount_due":
                try:
                    cleaned[name] = float(value)
                except (TypeError, ValueError) as exc:
                    raise ValidationError("amount_due must be numeric") from exc
            else:
                cleaned[name] = sanitize_text(value)
        return cleaned

    def update_invoice(self, invoice_id: str, updates: dict[str, Any]) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        for name, value in self._validate_updates(updates).items():
            setattr(invoice, name, value)
        self.commit()
        self.db.refresh(invoice)
        return invoice

    def delete_invoice(self, invoice_id: str) -> None:
        invoice = self.get_invoice(invoice_id)
        self.pdf_store.move_to_deleted(invoice.pdf_path)
        self.db.delete(invoice)
        self.commit()
        logger.info("invoice.deleted", extra={"event": "invoice.deleted", "invoice_id": invoice_id})

    def delete_all(self) -> dict[str, int]:
        """Remove every invoice and forecast; PDFs go to the deleted folder."""
        moved = 0
        invoices = self.db.query(Invoice).all()
        for invoice in invoices:
            if self.pdf_store.move_to_deleted(invoice.pdf_path, always_suffix=True) is not None:
                moved += 1
        deleted = self.db.query(Invoice).delete(synchronize_session=False)
        self.commit()
        ExpectedInvoiceService(self.db).delete_all()
        logger.warning(
            "invoice.deleted_all",
            extra={"event": "invoice.deleted_all", "deleted_invoices": deleted, "moved_files": moved},
        )
        return {"deleted_invoices": deleted, "moved_files": moved}

    def list_duplicate_numbers(self) -> list[dict[str, Any]]:
        """Invoice numbers appearing more than once, with the first-seen spelling."""
        numbers = [row[0] for row in self.db.query(Invoice.invoice_number).order_by(Invoice.created_at.asc())]
        counts = Counter(normalize_key(number) for number in numbers if normalize_key(number))
        first_spelling: dict[str, str] = {}
        for number in numbers:
            first_spelling.setdefault(normalize_key(number), number)
        return [
            {"invoice_number": first_spelling[key], "count": count}
            for key, count in counts.items()
            if count > 1
        ]

    def list_by_number(self, invoice_number: str) -> list[Invoice]:
        """All invoices sharing a number, most recently uploaded first."""
        return (
            self.db.query(Invoice)
            .filter(_number_key(Invoice.invoice_number) == normalize_key(invoice_number))
            .order_by(Invoice.upload_date.desc(), Invoice.created_at.desc())
            .all()
        )

    def delete_duplicates(self, invoice_number: str) -> int:
        """Keep the most recent upload of ``invoice_number`` and delete the rest."""
        records = self.list_by_number(invoice_number)
        if len(records) <= 1:
            return 0
        for record in records[1:]:
            self.pdf_store.remove(record.pdf_path)
            self.db.delete(record)
        self.commit()
        return len(records) - 1

    def mark_paid_by_number(self, invoice_number: str, payment_date: str) -> int:
        """Set status Paid on every invoice matching the number; returns rows updated."""
        key = normalize_key(invoice_number)
        if not key:
            return 0
        return (
            self.db.query(Invoice)
            .filter(_number_key(Invoice.invoice_number) == key)
            .update(
                {Invoice.status: InvoiceStatus.PAID.value, Invoice.payment_date: payment_date},
                synchronize_session=False,
            )
        )

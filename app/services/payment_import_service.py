"""Bulk payment status import from CSV or XLSX spreadsheets."""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from app.core.exceptions import ValidationError
from app.parsing.dates import parse_date
from app.services.base_service import BaseService
from app.services.invoice_service import InvoiceService
from app.utils.validators import is_iso_date

logger = logging.getLogger(__name__)

CSV_SUFFIXES = {".csv"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


@dataclass(frozen=True)
class PaymentRow:
    invoice_number: str
    payment_date: str


def read_payment_sheet(buffer: bytes, filename: str) -> pd.DataFrame:
    """Load the first sheet with no header row; column 1 is the invoice number, column 2 the payment date."""
    suffix = Path(filename or "").suffix.lower()
    try:
        if suffix in CSV_SUFFIXES:
            return pd.read_csv(io.BytesIO(buffer), header=None, dtype=object, skip_blank_lines=True)
        if suffix in EXCEL_SUFFIXES:
            return pd.read_excel(io.BytesIO(buffer), header=None, dtype=object, engine="openpyxl")
    except (ValueError, zipfile.BadZipFile) as exc:
        raise ValidationError(f"Could not read spreadsheet {filename}: {exc}") from exc
    raise ValidationError("Payment file must be .csv or .xlsx")


def _normalise_payment_date(value, invoice_number: str, today: date) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return today.isoformat()
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    if is_iso_date(text[:10]):
        return text[:10]
    parsed = parse_date(text, invoice_number)
    if parsed:
        return parsed
    logger.warning(
        "payments.unparseable_date",
        extra={"event": "payments.unparseable_date", "invoice_number": invoice_number, "value": text},
    )
    return today.isoformat()


def payment_rows(frame: pd.DataFrame, today: date) -> list[PaymentRow]:
    rows: list[PaymentRow] = []
    for record in frame.itertuples(index=False):
        values = list(record)
        raw_number = values[0] if values else None
        if raw_number is None or (not isinstance(raw_number, str) and pd.isna(raw_number)):
            continue
        invoice_number = str(raw_number).strip()
        if invoice_number.endswith(".0") and invoice_number[:-2].isdigit():
            invoice_number = invoice_number[:-2]
        if not invoice_number:
            continue
        raw_date = values[1] if len(values) > 1 else None
        rows.append(PaymentRow(invoice_number, _normalise_payment_date(raw_date, invoice_number, today)))
    return rows


class PaymentImportService(BaseService):
    def import_payments(self, buffer: bytes, filename: str, today: date | None = None) -> int:
        """Mark matching invoices Paid; returns the number of invoice rows updated."""
        frame = read_payment_sheet(buffer, filename)
        rows = payment_rows(frame, self._today(today))
        invoices = InvoiceService(self.db)
        updated = 0
        try:
            for row in rows:
                updated += invoices.mark_paid_by_number(row.invoice_number, row.payment_date)
            self.commit()
        except Exception:
            self.rollback()
            raise

        logger.info(
            "payments.imported",
            extra={"event": "payments.imported", "filename": filename, "rows": len(rows), "updated": updated},
        )
        return updated

"""Invoice text extraction: dates, fields, type and cadence."""

from app.parsing.classifier import classify_invoice_type
from app.parsing.dates import format_date_for_display, parse_date
from app.parsing.fields import ExtractionDiagnostic, InvoiceFields, extract_invoice_fields
from app.parsing.frequency import detect_frequency
from app.parsing.pdf_text import extract_pdf_text

__all__ = [
    "ExtractionDiagnostic",
    "InvoiceFields",
    "classify_invoice_type",
    "detect_frequency",
    "extract_invoice_fields",
    "extract_pdf_text",
    "format_date_for_display",
    "parse_date",
]

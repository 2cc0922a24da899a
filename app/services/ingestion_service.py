"""PDF ingestion: batch upload and in-place replacement of invoices."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import Config, get_config
from app.core.exceptions import ValidationError
from app.core.logging import LogContext, build_log_event
from app.models.invoice import Invoice
from app.parsing.fields import ExtractionDiagnostic, extract_invoice_fields
from app.parsing.pdf_text import extract_pdf_text
from app.services.base_service import BaseService
from app.services.expected_invoice_service import ExpectedInvoiceService
from app.services.invoice_service import InvoiceService
from app.services.pdf_store import PdfStore
from app.utils.ids import new_trace_id

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    filename: str
    content: bytes


@dataclass
class FileResult:
    filename: str
    status: str
    invoice_id: str | None = None
    invoice_number: str | None = None
    message: str | None = None
    diagnostics: list[ExtractionDiagnostic] = field(default_factory=list)


@dataclass
class DuplicateNotice:
    invoice_number: str
    filename: str
    existing_id: str


@dataclass
class BatchResult:
    invoices: list[Invoice] = field(default_factory=list)
    duplicates: list[DuplicateNotice] = field(default_factory=list)
    results: list[FileResult] = field(default_factory=list)
    expected_created: int = 0


class IngestionService(BaseService):
    """Turns uploaded PDFs into invoice rows.

    One unreadable or unsaveable file never fails the batch: it is reported as
    an ``error`` result and the remaining files carry on.
    """

    def __init__(
        self,
        db: Session | None = None,
        config: Config | None = None,
        pdf_store: PdfStore | None = None,
    ) -> None:
        super().__init__(db)
        self.config = config or get_config()
        self.pdf_store = pdf_store or PdfStore(self.config)
        self.invoices = InvoiceService(self.db, self.pdf_store)
        self.expected = ExpectedInvoiceService(self.db, self.config)

    def _check_size(self, upload: UploadedFile) -> None:
        if len(upload.content) > self.config.MAX_UPLOAD_BYTES:
            raise ValidationError(f"{upload.filename} exceeds the {self.config.MAX_UPLOAD_BYTES} byte upload limit")

    def _reconcile(self, invoice: Invoice, filename: str, trace_id: str) -> None:
        """Clear forecasts satisfied by ``invoice``. The invoice stays stored if this fails."""
        try:
            self.expected.reconcile_with_invoice(invoice)
        except SQLAlchemyError as exc:
            self.rollback()
            logger.error(
                "expected_invoices.reconcile_failed",
                extra=build_log_event(
                    "expected_invoices.reconcile_failed",
                    LogContext(invoice_number=invoice.invoice_number, source_file=filename, trace_id=trace_id),
                    invoice_id=invoice.id,
                    error=str(exc),
                ),
            )

    def _ingest_one(self, upload: UploadedFile, batch: BatchResult, today: date, trace_id: str) -> FileResult:
        self._check_size(upload)
        text = extract_pdf_text(upload.content)
        fields = extract_invoice_fields(text, upload.filename, today=today)

        existing = self.invoices.find_by_number(fields.invoice_number)
        if existing is not None:
            batch.duplicates.append(
                DuplicateNotice(invoice_number=fields.invoice_number, filename=upload.filename, existing_id=existing.id)
            )

        pdf_path = self.pdf_store.save(upload.content, upload.filename)
        try:
            invoice = self.invoices.create_from_fields(fields, pdf_path, upload.filename, today=today)
        except Exception:
            self.pdf_store.remove(pdf_path)
            raise
        batch.invoices.append(invoice)
        self._reconcile(invoice, upload.filename, trace_id)

        logger.info(
            "invoice.uploaded",
            extra=build_log_event(
                "invoice.uploaded",
                LogContext(invoice_number=invoice.invoice_number, source_file=upload.filename, trace_id=trace_id),
                invoice_id=invoice.id,
                fallbacks=len(fields.diagnostics),
            ),
        )
        return FileResult(
            filename=upload.filename,
            status="ok",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            diagnostics=fields.diagnostics,
        )

    def upload_batch(self, uploads: list[UploadedFile], today: date | None = None) -> BatchResult:
        day = self._today(today)
        trace_id = new_trace_id()
        batch = BatchResult()

        for upload in uploads:
            try:
                batch.results.append(self._ingest_one(upload, batch, day, trace_id))
            except Exception as exc:
                self.rollback()
                logger.error(
                    "invoice.upload_failed",
                    extra=build_log_event(
                        "invoice.upload_failed",
                        LogContext(source_file=upload.filename, trace_id=trace_id),
                        error=str(exc),
                        error_type=type(exc).__name__,
                    ),
                )
                batch.results.append(FileResult(filename=upload.filename, status="error", message=str(exc)))

        if batch.invoices:
            batch.expected_created = self.expected.generate_expected_invoices(today=day, trace_id=trace_id)
        return batch

    def replace_invoice(self, invoice_id: str, upload: UploadedFile, today: date | None = None) -> Invoice:
        """Re-extract an existing invoice from a new PDF; the old PDF is removed."""
        invoice = self.invoices.get_invoice(invoice_id)
        self._check_size(upload)
        day = self._today(today)
        fields = extract_invoice_fields(extract_pdf_text(upload.content), upload.filename, today=day)

        old_pdf_path = invoice.pdf_path
        new_pdf_path = self.pdf_store.save(upload.content, upload.filename)
        try:
            invoice = self.invoices.replace_fields(invoice, fields, new_pdf_path, upload.filename, today=day)
        except SQLAlchemyError:
            self.pdf_store.remove(new_pdf_path)
            raise
        self.pdf_store.remove(old_pdf_path)

        logger.info(
            "invoice.replaced",
            extra=build_log_event(
                "invoice.replaced",
                LogContext(invoice_number=invoice.invoice_number, source_file=upload.filename),
                invoice_id=invoice.id,
            ),
        )
        return invoice

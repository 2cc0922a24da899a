from __future__ import annotations

import io
from datetime import date

from pypdf import PdfReader, PdfWriter
from pypdf.errors import LimitReachedError

import app.parsing.pdf_text as pdf_text_module
from app.models import Invoice
from app.services.ingestion_service import IngestionService, UploadedFile

TODAY = date(2025, 3, 20)
SELF_REFERENCING = b"%PDF-1.7\n2 0 obj << /Kids [2 0 R] >> endobj\n%%EOF"


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def test_damaged_pdfs_do_not_fail_the_batch(db_session, pdf_store, monkeypatch):
    def _reader(stream):
        if stream.getvalue() == SELF_REFERENCING:
            raise LimitReachedError("Detected loop with self reference for IndirectObject(2, 0)")
        return PdfReader(stream)

    monkeypatch.setattr(pdf_text_module, "PdfReader", _reader)
    good = _blank_pdf()

    batch = IngestionService(db_session, pdf_store=pdf_store).upload_batch(
        [
            UploadedFile("truncated.pdf", good[: len(good) // 2]),
            UploadedFile("acme-health.pdf", good),
            UploadedFile("looping.pdf", SELF_REFERENCING),
        ],
        today=TODAY,
    )

    assert [result.status for result in batch.results] == ["error", "ok", "error"]
    assert "unreadable PDF" in batch.results[0].message
    assert "LimitReachedError" in batch.results[2].message

    [invoice] = batch.invoices
    assert invoice.pdf_original_name == "acme-health.pdf"
    assert invoice.invoice_date == "2025-03-20"
    assert pdf_store.resolve(invoice.pdf_path).read_bytes() == good
    assert db_session.query(Invoice).count() == 1
    assert [path.name for path in pdf_store.pdf_dir.glob("*.pdf")] == [pdf_store.resolve(invoice.pdf_path).name]


def test_truncated_pdf_alone_reports_error(db_session, pdf_store):
    good = _blank_pdf()

    batch = IngestionService(db_session, pdf_store=pdf_store).upload_batch(
        [UploadedFile("truncated.pdf", good[: len(good) // 2])], today=TODAY
    )

    assert [result.status for result in batch.results] == ["error"]
    assert batch.invoices == []
    assert batch.expected_created == 0

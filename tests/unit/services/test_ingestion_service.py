from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

import app.services.ingestion_service as ingestion_module
from app.core.config import get_config
from app.core.exceptions import ExtractionError, NotFoundError
from app.models import ExpectedInvoice, Invoice
from app.services.ingestion_service import IngestionService, UploadedFile

TODAY = date(2025, 3, 20)

PS_TEXT = """Invoice Number: 4012345
BILL TO:
Acme Health Pty Ltd
Invoice Date: 15-Mar-2025
Due Date: 14-Apr-2025
Description:
Professional Services Engagement
Item Subtotal
Invoice Total $1,234.56
"""

MONTHLY_TEXT = """Invoice Number: 4020001
Customer: Globex Corporation
Customer Contract: G-7
Invoice Date: 10-Jan-2025
Due Date: 09-Feb-2025
Description:
Monthly Subscription Fee
Item Subtotal
Invoice Total $500.00
"""


def _fake_extract(content: bytes) -> str:
    if content == b"broken":
        raise ExtractionError("unreadable PDF: EOF marker not found")
    return content.decode("utf-8")


@pytest.fixture(autouse=True)
def _text_from_bytes(monkeypatch):
    monkeypatch.setattr(ingestion_module, "extract_pdf_text", _fake_extract)


def test_batch_upload_isolates_failing_file(db_session, pdf_store):
    service = IngestionService(db_session, pdf_store=pdf_store)
    batch = service.upload_batch(
        [UploadedFile("acme.pdf", PS_TEXT.encode()), UploadedFile("broken.pdf", b"broken")],
        today=TODAY,
    )

    assert [result.status for result in batch.results] == ["ok", "error"]
    assert "EOF marker" in batch.results[1].message
    [invoice] = batch.invoices
    assert invoice.invoice_date == "2025-03-15"
    assert invoice.due_date == "2025-04-14"
    assert invoice.amount_due == 1234.56
    assert invoice.invoice_type == "PS"
    assert invoice.frequency == "adhoc"
    assert invoice.status == "Pending"
    assert invoice.upload_date == "2025-03-20"
    assert invoice.pdf_original_name == "acme.pdf"
    assert pdf_store.resolve(invoice.pdf_path).read_bytes() == PS_TEXT.encode()
    assert db_session.query(Invoice).count() == 1


def test_duplicate_numbers_are_stored_and_reported(db_session, pdf_store):
    service = IngestionService(db_session, pdf_store=pdf_store)
    first = service.upload_batch([UploadedFile("acme.pdf", PS_TEXT.encode())], today=TODAY)
    second = service.upload_batch([UploadedFile("acme-again.pdf", PS_TEXT.encode())], today=TODAY)

    assert first.duplicates == []
    [notice] = second.duplicates
    assert notice.invoice_number == "4012345"
    assert notice.existing_id == first.invoices[0].id
    assert db_session.query(Invoice).count() == 2


def test_oversized_upload_is_reported_not_raised(db_session, pdf_store):
    config = replace(get_config(), MAX_UPLOAD_BYTES=10)
    batch = IngestionService(db_session, config=config, pdf_store=pdf_store).upload_batch(
        [UploadedFile("acme.pdf", PS_TEXT.encode())], today=TODAY
    )

    assert batch.results[0].status == "error"
    assert batch.invoices == []


def test_fallback_diagnostics_are_returned(db_session, pdf_store):
    batch = IngestionService(db_session, pdf_store=pdf_store).upload_batch(
        [UploadedFile("scan.pdf", b"nothing useful here")], today=TODAY
    )

    result = batch.results[0]
    assert result.status == "ok"
    assert {item.field for item in result.diagnostics} >= {"client", "invoice_date", "amount_due"}
    assert batch.invoices[0].client == "Unknown Client"


def test_recurring_upload_generates_and_reconciles_forecasts(db_session, pdf_store):
    service = IngestionService(db_session, pdf_store=pdf_store)

    batch = service.upload_batch([UploadedFile("globex-jan.pdf", MONTHLY_TEXT.encode())], today=TODAY)
    assert batch.expected_created == 1
    forecast = db_session.query(ExpectedInvoice).one()
    assert forecast.expected_date == "2025-02-10"
    assert forecast.customer_contract == "G-7"

    february = MONTHLY_TEXT.replace("4020001", "4020002").replace("10-Jan-2025", "12-Feb-2025")
    service.upload_batch([UploadedFile("globex-feb.pdf", february.encode())], today=TODAY)

    assert db_session.query(ExpectedInvoice).filter(ExpectedInvoice.expected_date == "2025-02-10").count() == 0


def test_replace_invoice_reextracts_and_removes_old_pdf(db_session, pdf_store):
    service = IngestionService(db_session, pdf_store=pdf_store)
    original = service.upload_batch([UploadedFile("acme.pdf", PS_TEXT.encode())], today=TODAY).invoices[0]
    old_path = original.pdf_path

    updated_text = PS_TEXT.replace("$1,234.56", "$2,000.00").replace("4012345", "4019999")
    replaced = service.replace_invoice(original.id, UploadedFile("acme-v2.pdf", updated_text.encode()), today=TODAY)

    assert replaced.id == original.id
    assert replaced.invoice_number == "4012345"
    assert replaced.amount_due == 2000.0
    assert replaced.pdf_original_name == "acme-v2.pdf"
    assert not pdf_store.resolve(old_path).exists()
    assert pdf_store.resolve(replaced.pdf_path).exists()


def test_replace_unknown_invoice_raises(db_session, pdf_store):
    with pytest.raises(NotFoundError):
        IngestionService(db_session, pdf_store=pdf_store).replace_invoice(
            "missing", UploadedFile("x.pdf", PS_TEXT.encode())
        )


def test_replace_with_unreadable_pdf_leaves_invoice_untouched(db_session, pdf_store):
    service = IngestionService(db_session, pdf_store=pdf_store)
    original = service.upload_batch([UploadedFile("acme.pdf", PS_TEXT.encode())], today=TODAY).invoices[0]

    with pytest.raises(ExtractionError):
        service.replace_invoice(original.id, UploadedFile("bad.pdf", b"broken"))

    db_session.refresh(original)
    assert original.amount_due == 1234.56
    assert pdf_store.resolve(original.pdf_path).exists()


def test_reconcile_failure_keeps_uploaded_invoice(db_session, pdf_store, monkeypatch):
    service = IngestionService(db_session, pdf_store=pdf_store)

    def _locked(invoice):
        raise OperationalError("DELETE FROM expected_invoices", {}, Exception("database is locked"))

    monkeypatch.setattr(service.expected, "reconcile_with_invoice", _locked)

    batch = service.upload_batch([UploadedFile("globex-jan.pdf", MONTHLY_TEXT.encode())], today=TODAY)

    [result] = batch.results
    assert result.status == "ok"
    [invoice] = batch.invoices
    assert result.invoice_id == invoice.id
    assert db_session.query(Invoice).count() == 1
    assert pdf_store.resolve(invoice.pdf_path).exists()

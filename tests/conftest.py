from __future__ import annotations

import os
import tempfile
from dataclasses import replace
from pathlib import Path

import pytest

_TMP_ROOT = Path(tempfile.mkdtemp(prefix="invoice_tracker_test_"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_ROOT / 'invoice_tracker_test.db'}")
os.environ["PDF_DIR"] = str(_TMP_ROOT / "pdfs")
os.environ["DELETED_PDF_DIR"] = str(_TMP_ROOT / "pdfs" / "deleted")
os.environ["LOG_FILE"] = ""
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.config import get_config  # noqa: E402
from app.models import Base, Invoice  # noqa: E402
from app.services.exchange_rates import reset_exchange_rates  # noqa: E402
from app.services.pdf_store import PdfStore  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def pdf_store(tmp_path):
    config = replace(
        get_config(),
        PDF_DIR=str(tmp_path / "pdfs"),
        DELETED_PDF_DIR=str(tmp_path / "pdfs" / "deleted"),
    )
    store = PdfStore(config)
    store.ensure_dirs()
    return store


@pytest.fixture
def make_invoice(db_session):
    def _make(**overrides) -> Invoice:
        values = {
            "invoice_number": "4012345",
            "client": "Acme Health",
            "customer_contract": "C-100",
            "invoice_type": "Sub",
            "invoice_date": "2025-01-10",
            "due_date": "2025-02-09",
            "amount_due": 1000.0,
            "currency": "USD",
            "frequency": "monthly",
            "status": "Pending",
            "upload_date": "2025-01-10",
        }
        values.update(overrides)
        invoice = Invoice(**values)
        db_session.add(invoice)
        db_session.commit()
        db_session.refresh(invoice)
        return invoice

    return _make


@pytest.fixture(autouse=True)
def _reset_rates():
    reset_exchange_rates()
    yield
    reset_exchange_rates()

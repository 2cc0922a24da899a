from __future__ import annotations

from pathlib import Path

from app.models import Base
import app.models  # noqa: F401

MIGRATIONS = Path(__file__).resolve().parents[3] / "migrations" / "versions"


def test_model_metadata_contains_target_tables():
    assert set(Base.metadata.tables) == {
        "invoices",
        "contracts",
        "expected_invoices",
        "dismissed_expected_invoices",
    }


def test_calendar_dates_are_plain_strings():
    invoices = Base.metadata.tables["invoices"]
    for name in ("invoice_date", "due_date", "payment_date", "upload_date"):
        assert invoices.c[name].type.python_type is str
        assert invoices.c[name].type.length == 10


def test_tombstone_key_is_unique():
    dismissed = Base.metadata.tables["dismissed_expected_invoices"]
    unique_columns = [
        tuple(column.name for column in constraint.columns)
        for constraint in dismissed.constraints
        if constraint.__class__.__name__ == "UniqueConstraint"
    ]
    assert ("client", "customer_contract", "invoice_type", "expected_date") in unique_columns


def test_baseline_migration_creates_every_table():
    [baseline] = sorted(MIGRATIONS.glob("*_baseline.py"))
    source = baseline.read_text()
    for table in Base.metadata.tables:
        assert f'"{table}"' in source

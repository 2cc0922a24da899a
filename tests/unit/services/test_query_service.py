from __future__ import annotations

from datetime import date

import pytest

from app.models import Invoice
from app.services.exchange_rates import DEFAULT_RATES
from app.services.query_service import run_invoice_query

TODAY = date(2025, 4, 10)


@pytest.fixture
def invoices():
    return [
        Invoice(
            invoice_number="1001",
            client="Acme Health",
            customer_contract="C-100",
            invoice_type="Sub",
            invoice_date="2025-03-05",
            due_date="2025-04-04",
            amount_due=1000.0,
            currency="USD",
            frequency="monthly",
            status="Pending",
        ),
        Invoice(
            invoice_number="1002",
            client="Acme Health",
            customer_contract="",
            invoice_type="PS",
            invoice_date="2025-01-15",
            due_date="2025-02-14",
            amount_due=500.0,
            currency="AUD",
            frequency="adhoc",
            status="Paid",
        ),
        Invoice(
            invoice_number="1003",
            client="Globex",
            customer_contract="G-7",
            invoice_type="MS",
            invoice_date="2025-03-20",
            due_date="2025-04-19",
            amount_due=2000.0,
            currency="USD",
            frequency="quarterly",
            status="Pending",
        ),
        Invoice(
            invoice_number="1004",
            client="Globex",
            customer_contract="G-7",
            invoice_type="Credit Memo",
            invoice_date="2025-03-25",
            due_date="2025-03-25",
            amount_due=-100.0,
            currency="USD",
            frequency="adhoc",
            status="Pending",
        ),
    ]


def _numbers(result):
    return sorted(inv.invoice_number for inv in result["invoices"])


def _ask(query, invoices):
    return run_invoice_query(query, invoices, today=TODAY, rates=DEFAULT_RATES)


def test_count_for_client(invoices):
    result = _ask("How many invoices for Acme?", invoices)
    assert result["type"] == "count"
    assert result["count"] == 2


def test_total_paid_converts_to_usd(invoices):
    result = _ask("total paid for acme", invoices)
    assert result["type"] == "total"
    assert result["value"] == 325
    assert _numbers(result) == ["1002"]


def test_overdue_excludes_credit_memos_and_future_due_dates(invoices):
    assert _numbers(_ask("overdue invoices", invoices)) == ["1001"]


def test_unpaid_with_type_code(invoices):
    assert _numbers(_ask("unpaid ms invoices", invoices)) == ["1003"]


def test_type_codes_match_whole_words_only(invoices):
    assert _ask("invoices with payment terms", invoices)["count"] == 4


def test_month_window_on_invoice_date(invoices):
    assert _numbers(_ask("invoices in march 2025", invoices)) == ["1001", "1003", "1004"]


def test_due_queries_use_due_date(invoices):
    assert _numbers(_ask("invoices due in april 2025", invoices)) == ["1001", "1003"]


def test_relative_windows(invoices):
    assert _numbers(_ask("invoices this month", invoices)) == []
    assert _numbers(_ask("invoices last month", invoices)) == ["1001", "1003", "1004"]
    assert _ask("invoices this year", invoices)["count"] == 4
    assert _ask("invoices last year", invoices)["count"] == 0


def test_between_window(invoices):
    assert _numbers(_ask("invoices between 2025-01-01 and 2025-01-31", invoices)) == ["1002"]


def test_average_by_currency(invoices):
    result = _ask("average of aud invoices", invoices)
    assert result["type"] == "average"
    assert result["value"] == 325
    assert result["count"] == 1


def test_frequency_filter(invoices):
    assert _numbers(_ask("quarterly invoices", invoices)) == ["1003"]
    assert _numbers(_ask("one-time invoices", invoices)) == ["1002", "1004"]


def test_contract_filter_is_not_read_as_client(invoices):
    result = _ask("total for contract c-100", invoices)
    assert _numbers(result) == ["1001"]
    assert result["value"] == 1000


def test_empty_query_lists_everything(invoices):
    result = _ask("", invoices)
    assert result["type"] == "list"
    assert result["count"] == 4


def test_average_of_nothing_is_zero(invoices):
    result = _ask("average for nobody", invoices)
    assert result["count"] == 0
    assert result["value"] == 0

from __future__ import annotations

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.services.contract_service import ContractService
from app.services.exchange_rates import DEFAULT_RATES


def test_upsert_creates_then_updates_by_normalised_name(db_session):
    service = ContractService(db_session)

    contract, action = service.upsert_contract("C-100", 1000, "usd")
    assert action == "created"
    assert contract.currency == "USD"

    updated, action = service.upsert_contract("  c-100 ", "2500.50", "AUD")
    assert action == "updated"
    assert updated.id == contract.id
    assert updated.contract_name == "C-100"
    assert updated.contract_value == 2500.5
    assert updated.currency == "AUD"
    assert len(service.list_contracts()) == 1


@pytest.mark.parametrize(
    "name, value, currency",
    [("", 100, "USD"), ("C-1", None, "USD"), ("C-1", "abc", "USD"), ("C-1", 0, "USD"), ("C-1", 100, "JPY")],
)
def test_upsert_rejects_invalid_input(db_session, name, value, currency):
    with pytest.raises(ValidationError):
        ContractService(db_session).upsert_contract(name, value, currency)


def test_delete_contract(db_session):
    service = ContractService(db_session)
    service.upsert_contract("C-100", 1000)
    service.delete_contract("c-100")
    assert service.list_contracts() == []
    with pytest.raises(NotFoundError):
        service.delete_contract("C-100")


def test_progress_excludes_credit_memos_and_caps_percentages(db_session, make_invoice):
    service = ContractService(db_session)
    service.upsert_contract("C-100", 1000, "USD")
    make_invoice(invoice_number="1", amount_due=600, status="Paid")
    make_invoice(invoice_number="2", customer_contract=" c-100 ", amount_due=700)
    make_invoice(invoice_number="3", invoice_type="Credit Memo", amount_due=-200)
    make_invoice(invoice_number="4", customer_contract="OTHER", amount_due=5000)

    [row] = service.contract_progress(rates=DEFAULT_RATES)

    assert row["contract_name"] == "C-100"
    assert row["invoice_count"] == 2
    assert row["invoiced_usd"] == 1300
    assert row["paid_usd"] == 600
    assert row["remaining_usd"] == -300
    assert row["invoiced_percentage"] == 100
    assert row["paid_percentage"] == 60


def test_progress_converts_to_usd(db_session, make_invoice):
    service = ContractService(db_session)
    service.upsert_contract("C-200", 1000, "AUD")
    make_invoice(customer_contract="C-200", amount_due=500, currency="AUD", status="Paid")

    [row] = service.contract_progress(rates={"USD": 1.0, "AUD": 0.5})

    assert row["contract_value_usd"] == 500
    assert row["invoiced_usd"] == 250
    assert row["paid_percentage"] == 50

from __future__ import annotations

import pytest

from app.core.enums import Frequency, InvoiceType
from app.parsing.classifier import classify_invoice_type
from app.parsing.frequency import detect_frequency


def test_negative_amount_is_credit_memo_regardless_of_text():
    assert classify_invoice_type("Professional Services", "X", -50) == InvoiceType.CREDIT_MEMO
    assert classify_invoice_type(None, "X", -0.01) == InvoiceType.CREDIT_MEMO


def test_missing_services_defaults_to_ps():
    assert classify_invoice_type(None, "X", 100) == InvoiceType.PS
    assert classify_invoice_type("", "X", 100) == InvoiceType.PS


def test_professional_services_checked_before_managed_and_maintenance():
    assert classify_invoice_type("Professional Services - Managed Support", "X", 100) == InvoiceType.PS


@pytest.mark.parametrize(
    "services, expected",
    [
        ("Credit for overbilling", InvoiceType.CREDIT_MEMO),
        ("Consulting hours March", InvoiceType.PS),
        ("Managed Services - March", InvoiceType.MS),
        ("Subscription and managed platform", InvoiceType.MS),
        ("Annual maintenance renewal", InvoiceType.MAINT),
        ("Maintenance under subscription", InvoiceType.SUB),
        ("Perpetual licence purchase", InvoiceType.SW),
        ("Annual license fee", InvoiceType.SUB),
        ("SaaS platform access", InvoiceType.SUB),
        ("Cloud services usage", InvoiceType.HOSTING),
        ("Software upgrade", InvoiceType.SW),
        ("Hardware replacement", InvoiceType.HW),
        ("Third party tooling", InvoiceType.THIRD_PARTY),
        ("Miscellaneous", InvoiceType.PS),
    ],
)
def test_rules_in_order(services, expected):
    assert classify_invoice_type(services, "X", 100) == expected


def test_semi_annual_is_not_annual():
    assert detect_frequency("Semi-Annual License Fee") == Frequency.BI_ANNUAL


@pytest.mark.parametrize(
    "services, expected",
    [
        ("Monthly hosting fee", Frequency.MONTHLY),
        ("Quarterly support", Frequency.QUARTERLY),
        ("Support Q3 2025", Frequency.QUARTERLY),
        ("Support Jan - Apr", Frequency.QUARTERLY),
        ("Billed every 3 months", Frequency.QUARTERLY),
        ("Bi-annual review", Frequency.BI_ANNUAL),
        ("Six month term", Frequency.BI_ANNUAL),
        ("Tri-annual licence", Frequency.TRI_ANNUAL),
        ("4 month block", Frequency.TRI_ANNUAL),
        ("Annual subscription", Frequency.ANNUAL),
        ("Yearly renewal", Frequency.ANNUAL),
        ("Implementation workshop", Frequency.ADHOC),
    ],
)
def test_frequency_keywords(services, expected):
    assert detect_frequency(services) == expected


def test_empty_services_is_adhoc():
    assert detect_frequency(None) == Frequency.ADHOC
    assert detect_frequency("") == Frequency.ADHOC

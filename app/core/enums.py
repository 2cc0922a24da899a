"""Canonical enum values for invoices and forecasts."""

from __future__ import annotations

import enum


class InvoiceType(str, enum.Enum):
    PS = "PS"
    MAINT = "Maint"
    SUB = "Sub"
    HOSTING = "Hosting"
    MS = "MS"
    SW = "SW"
    HW = "HW"
    THIRD_PARTY = "3PP"
    CREDIT_MEMO = "Credit Memo"


class Frequency(str, enum.Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    TRI_ANNUAL = "tri-annual"
    BI_ANNUAL = "bi-annual"
    ANNUAL = "annual"
    ADHOC = "adhoc"


class InvoiceStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"


class Currency(str, enum.Enum):
    USD = "USD"
    AUD = "AUD"
    EUR = "EUR"
    GBP = "GBP"
    SGD = "SGD"
    NZD = "NZD"


# Currencies the PDF extractor recognises on an invoice.
INVOICE_CURRENCIES = (Currency.USD, Currency.AUD, Currency.EUR, Currency.GBP, Currency.SGD)

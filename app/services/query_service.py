"""Keyword filter over invoices for plain-English questions.

``run_invoice_query`` narrows the invoice list with each filter the question
mentions (type, client, contract, status, date window, frequency, currency)
and then answers as a list, a count, a USD total or a USD average.
"""

from __future__ import annotations

import calendar
import math
import re
from collections.abc import Iterable
from datetime import date
from typing import Any

from app.core.enums import INVOICE_CURRENCIES, Frequency, InvoiceStatus, InvoiceType
from app.models.invoice import Invoice
from app.services.exchange_rates import convert_to_usd

TYPE_KEYWORDS = ("ps", "maint", "sub", "hosting", "ms", "sw", "hw", "3pp", "credit memo")

CLIENT_RE = re.compile(
    r"\b(?:for|from|by|to|issued to|sent to)\s+([a-z0-9\s&'.,-]+?)"
    r"(?:\s+(?:what|total|sum|how|invoices|are|is|in|during|between|this|last|current|previous|due|on|with)\b|\s*\?|$)"
)
CONTRACT_RE = re.compile(
    r"\b(?:contract|on contract|for contract)\s+([a-z0-9\s\-_'.&,]+?)"
    r"(?:\s+(?:what|total|sum|how|invoices|in|during)\b|\s*\?|$)"
)
BETWEEN_RE = re.compile(r"between\s+(\d{4}-\d{2}-\d{2})\s+and\s+(\d{4}-\d{2}-\d{2})")
YEAR_RE = re.compile(r"\b(20\d{2})\b")

MONTH_NAMES = tuple(name.lower() for name in calendar.month_name[1:])

# Checked in order so "semi-annual" is not read as "annual".
FREQUENCY_KEYWORDS = (
    (("bi-annual", "semi-annual"), Frequency.BI_ANNUAL.value),
    (("tri-annual",), Frequency.TRI_ANNUAL.value),
    (("monthly",), Frequency.MONTHLY.value),
    (("quarterly",), Frequency.QUARTERLY.value),
    (("annual",), Frequency.ANNUAL.value),
    (("adhoc", "ad hoc", "one-time"), Frequency.ADHOC.value),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _month_bounds(year: int, month: int) -> tuple[str, str]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1).isoformat(), date(year, month, last_day).isoformat()


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _filter_types(query: str, invoices: list[Invoice]) -> list[Invoice]:
    type_values = {item.value.lower(): item.value for item in InvoiceType}
    for keyword in TYPE_KEYWORDS:
        if re.search(rf"\b{re.escape(keyword)}\b", query):
            wanted = type_values[keyword]
            invoices = [inv for inv in invoices if (inv.invoice_type or "") == wanted]
    return invoices


def _filter_client(query: str, invoices: list[Invoice]) -> list[Invoice]:
    match = CLIENT_RE.search(query)
    if not match:
        return invoices
    client = match.group(1).strip()
    if not client or client.startswith("contract"):
        return invoices
    return [inv for inv in invoices if inv.client and client in inv.client.lower()]


def _filter_contract(query: str, invoices: list[Invoice]) -> list[Invoice]:
    match = CONTRACT_RE.search(query)
    if not match:
        return invoices
    contract = match.group(1).strip()
    if not contract:
        return invoices
    return [inv for inv in invoices if inv.customer_contract and contract in inv.customer_contract.lower()]


def _is_open(invoice: Invoice) -> bool:
    return invoice.status == InvoiceStatus.PENDING.value and invoice.invoice_type != InvoiceType.CREDIT_MEMO.value


def _filter_status(query: str, invoices: list[Invoice], today: date) -> list[Invoice]:
    # "unpaid" contains "paid", so the open-invoice checks come first.
    if "overdue" in query:
        today_iso = today.isoformat()
        return [inv for inv in invoices if _is_open(inv) and inv.due_date and inv.due_date < today_iso]
    if any(term in query for term in ("unpaid", "pending", "outstanding")):
        return [inv for inv in invoices if _is_open(inv)]
    if "paid" in query:
        return [inv for inv in invoices if inv.status == InvoiceStatus.PAID.value]
    return invoices


def _date_windows(query: str, today: date) -> list[tuple[str, str]]:
    windows: list[tuple[str, str]] = []
    if "this month" in query or "current month" in query:
        windows.append(_month_bounds(today.year, today.month))
    if "last month" in query or "previous month" in query:
        windows.append(_month_bounds(*_shift_month(today.year, today.month, -1)))
    if "this year" in query or "current year" in query:
        windows.append((f"{today.year}-01-01", f"{today.year}-12-31"))
    if "last year" in query or "previous year" in query:
        windows.append((f"{today.year - 1}-01-01", f"{today.year - 1}-12-31"))

    year_match = YEAR_RE.search(query)
    year = int(year_match.group(1)) if year_match else today.year
    for index, name in enumerate(MONTH_NAMES, start=1):
        if name in query:
            windows.append(_month_bounds(year, index))

    between = BETWEEN_RE.search(query)
    if between:
        windows.append((between.group(1), between.group(2)))
    return windows


def _filter_dates(query: str, invoices: list[Invoice], today: date) -> list[Invoice]:
    field = "due_date" if "due" in query else "invoice_date"
    for start, end in _date_windows(query, today):
        invoices = [inv for inv in invoices if start <= (getattr(inv, field) or "") <= end]
    return invoices


def _filter_frequency(query: str, invoices: list[Invoice]) -> list[Invoice]:
    for keywords, value in FREQUENCY_KEYWORDS:
        if any(keyword in query for keyword in keywords):
            return [inv for inv in invoices if (inv.frequency or "").lower() == value]
    return invoices


def _filter_currency(query: str, invoices: list[Invoice]) -> list[Invoice]:
    for currency in INVOICE_CURRENCIES:
        if re.search(rf"\b{currency.value.lower()}\b", query):
            invoices = [inv for inv in invoices if (inv.currency or "").upper() == currency.value]
    return invoices


def run_invoice_query(
    query: str,
    invoices: Iterable[Invoice],
    today: date | None = None,
    rates: dict[str, float] | None = None,
) -> dict[str, Any]:
    """Filter ``invoices`` by the keywords in ``query`` and shape the answer."""
    text = (query or "").lower()
    day = today or date.today()
    results = list(invoices)

    results = _filter_types(text, results)
    results = _filter_client(text, results)
    results = _filter_contract(text, results)
    results = _filter_status(text, results, day)
    results = _filter_dates(text, results, day)
    results = _filter_frequency(text, results)
    results = _filter_currency(text, results)

    wants_count = any(term in text for term in ("how many", "count", "number of"))
    wants_total = any(term in text for term in ("total", "sum", "how much", "value"))
    wants_average = "average" in text or "mean" in text

    total = sum(_round_half_up(convert_to_usd(inv.amount_due, inv.currency, rates)) for inv in results)
    count = len(results)

    if wants_average:
        return {
            "type": "average",
            "value": total / count if count else 0,
            "total": total,
            "count": count,
            "invoices": results,
        }
    if wants_total:
        return {"type": "total", "value": total, "count": count, "invoices": results}
    if wants_count:
        return {"type": "count", "count": count, "invoices": results}
    return {"type": "list", "count": count, "invoices": results}

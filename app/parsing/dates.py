"""Calendar date parsing for values captured off invoice PDFs.

Dates are handled as plain ``YYYY-MM-DD`` strings end to end. Nothing in this
module builds a timezone-aware datetime, so a parsed date can never shift by a
day on its way to storage or display.
"""

from __future__ import annotations

import re
from datetime import date, timedelta

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Invoice series printed with US (MM-DD-YYYY) dates. Every other series is
# treated as international (DD-MM-YYYY).
US_FORMAT_PREFIXES = ("46", "47", "48", "49")

NAMED_MONTH_RE = re.compile(r"(\d{1,2})[-/\s]([a-z]+)[-/\s](\d{2,4})", re.IGNORECASE)
NUMERIC_SPLIT_RE = re.compile(r"[-/]")
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def date_format_for_invoice_number(invoice_number: str | None) -> str:
    """Return ``"us"`` or ``"international"`` for an invoice number's series."""
    if not invoice_number:
        return "international"
    if str(invoice_number).strip().startswith(US_FORMAT_PREFIXES):
        return "us"
    return "international"


def _leading_int(value: str) -> int | None:
    match = LEADING_INT_RE.match(value)
    if not match:
        return None
    return int(match.group(1))


def _expand_year(year: int) -> int:
    return year + 2000 if year < 100 else year


def _from_components(year: int, month: int, day: int) -> str | None:
    """Build a date from components, letting the day roll over like UTC construction does."""
    try:
        built = date(year, month, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError):
        return None
    return built.isoformat()


def _parse_named_month(cleaned: str) -> str | None:
    match = NAMED_MONTH_RE.search(cleaned)
    if not match:
        return None
    month = MONTHS.get(match.group(2).lower())
    if not month:
        return None
    day = int(match.group(1))
    year = _expand_year(int(match.group(3)))
    return _from_components(year, month, day)


def parse_date(raw: str | None, invoice_number: str | None = None) -> str | None:
    """Parse a captured date string into ``YYYY-MM-DD``.

    Named months are tried first (``12-Mar-2025``, ``15 January 25``). Numeric
    dates are split on ``-`` or ``/``; a part above 12 pins down the day, and
    fully ambiguous dates fall back to the invoice number's series.

    Returns ``None`` for anything unparseable. Never raises.
    """
    if not raw or not isinstance(raw, str):
        return None

    cleaned = raw.strip()
    named = _parse_named_month(cleaned)
    if named:
        return named

    parts = NUMERIC_SPLIT_RE.split(cleaned)
    if len(parts) != 3:
        return None

    first, second, third = (_leading_int(part) for part in parts)
    if first is None or second is None or third is None:
        return None

    year = _expand_year(third)
    if first > 12:
        day, month = first, second
    elif second > 12:
        month, day = first, second
    elif date_format_for_invoice_number(invoice_number) == "us":
        month, day = first, second
    else:
        day, month = first, second

    if month < 1 or month > 12:
        return None
    if day < 1 or day > 31:
        return None

    return _from_components(year, month, day)


def format_date_for_display(value: str | None) -> str:
    """Render ``YYYY-MM-DD`` as ``DD-Mon-YY``; empty string when it cannot."""
    if not value:
        return ""
    parts = value.split("T")[0].split("-")
    if len(parts) != 3:
        return ""
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError:
        return ""
    if month < 1 or month > 12:
        return ""
    return f"{day:02d}-{MONTH_ABBREVIATIONS[month - 1]}-{str(year)[-2:]}"


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    next_month_start = date(year + (month // 12), month % 12 + 1, 1)
    last_day = (next_month_start - timedelta(days=1)).day
    return date(year, month, min(value.day, last_day))

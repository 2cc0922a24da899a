"""Field extraction from invoice PDF text.

Each field is pulled with a prioritised list of regex alternatives; the first
alternative that matches wins. Every field has a terminal fallback, so
``extract_invoice_fields`` always returns a complete record and never raises.
Fallbacks that fabricate data (today's date, ``Unknown Client``, zero amount)
are logged and recorded on ``InvoiceFields.diagnostics``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Any

from app.core.enums import Frequency, InvoiceType
from app.core.logging import LogContext, build_log_event
from app.parsing.classifier import classify_invoice_type
from app.parsing.dates import parse_date
from app.parsing.frequency import detect_frequency

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"
NO_SERVICES = "No service description found"
DEFAULT_CURRENCY = "USD"
DUE_DATE_FALLBACK_DAYS = 30
MAX_CLIENT_LENGTH = 100
MAX_SERVICES_LENGTH = 500
# Column widths on the invoices table.
MAX_INVOICE_NUMBER_LENGTH = 64
MAX_REFERENCE_LENGTH = 128

_I = re.IGNORECASE

INVOICE_NUMBER_PATTERNS = (
    re.compile(r"Invoice\s*(?:#|No\.?|Number)?\s*[:\s]*([0-9][A-Z0-9-]+)", _I),
    re.compile(r"Tax\s*Invoice\s*[:\s]*([0-9][A-Z0-9-]+)", _I),
    re.compile(r"Credit\s*Memo\s*[:\s#]*([0-9][A-Z0-9-]+)", _I),
    re.compile(r"Invoice\s+([0-9][A-Z0-9-]+)", _I),
)

BILL_TO_RE = re.compile(
    r"BILL\s*TO:?\s*([\s\S]{0,400}?)(?:Transaction\s+Type|Description|Week\s+Ending|Special\s+Instructions|$)",
    _I,
)
MINISTER_RE = re.compile(r"Minister\s+for\s+Health", _I)
MINISTER_PREFIX_RE = re.compile(r"^Minister\s+for\s+Health\s+aka\s+", _I)
CONTINUATION_RE = re.compile(r"^(?:Health|(?:Pty|Ltd|Limited|Inc|Corporation)\.?)$", _I)

# Lines inside a BILL TO block that are never the client name.
BILL_TO_SKIP_PATTERNS = (
    re.compile(r"^ATTN:", _I),
    re.compile(r"^PO\s*BOX", _I),
    re.compile(r"^c/o\s+", _I),
    re.compile(r"^[A-Z]{2}$"),
    re.compile(r"^SHIP\s*TO", _I),
    re.compile(r"^Remittance$", _I),
    re.compile(r"^\d{4,}$"),
    re.compile(r"^[A-Za-z]+\s+\d{4}$"),
    re.compile(r"^GPO\s+Box", _I),
    re.compile(r"^(?:Application|Digital|Shared)\s+(?:Services|Health)", _I),
    re.compile(r"^(?:DHW-|Accounts\s+Payable$)", _I),
    re.compile(r"(?:Dr|St|Ave|Road|Street|Boulevard|Drive|Avenue)\s+(?:corner|and|\d)", _I),
    re.compile(r"^\d+\s+[A-Z]"),
    re.compile(r"^(?:Bonifacio|Taguig|Adelaide|Sydney|Melbourne|Brisbane)", _I),
)

CLIENT_LABEL_RE = re.compile(r"(?:Customer|Client|Company)[:\s]+([^\n]+)", _I)
CLIENT_LABEL_REJECT_RE = re.compile(r"^(?:Number|#)", _I)
TO_HEADER_RE = re.compile(r"(?:^|\n)TO:\s*\n([^\n]+)", _I)
TO_HEADER_REJECT_RE = re.compile(r"^(?:SHIP|BILL|SOLD|SEND)\s+TO:?$", _I)
FILENAME_CLIENT_RE = re.compile(r"([A-Za-z\s&]{6,})_")
CLIENT_CHARS_RE = re.compile(r"[^A-Za-z0-9_\s&-]")

CURRENCY_RE = re.compile(r"\b(USD|AUD|EUR|GBP|SGD)\b", _I)

_NUMERIC_DATE = r"([0-9]{1,2}[-/][0-9]{1,2}[-/][0-9]{2,4})"
_NAMED_DATE = r"([0-9]{1,2}[-/\s][a-z]+[-/\s][0-9]{2,4})"
_SLASH_DATE = r"([0-9]{1,2}/[0-9]{1,2}/[0-9]{2,4})"

INVOICE_DATE_PATTERNS = (
    re.compile(r"Invoice\s+Date[:\s]*" + _NUMERIC_DATE, _I),
    re.compile(r"Invoice\s+Date[:\s]*" + _NAMED_DATE, _I),
    re.compile(r"DATE[:\s]*" + _SLASH_DATE, _I),
    re.compile(r"Credit\s+Date[:\s]*" + _NUMERIC_DATE, _I),
    re.compile(r"Credit\s+Date[:\s]*" + _NAMED_DATE, _I),
)

DUE_DATE_PATTERNS = (
    re.compile(r"Due\s+Date[:\s]*" + _NUMERIC_DATE, _I),
    re.compile(r"Due\s+Date[:\s]*" + _NAMED_DATE, _I),
    re.compile(r"DUE\s+DATE[:\s]*" + _SLASH_DATE, _I),
    re.compile(r"Payment\s+Due[:\s]*" + _NUMERIC_DATE, _I),
)

AMOUNT_PATTERNS = (
    re.compile(r"Invoice\s*Total[\s:]*\$?\s*-?\s*([\d,]+\.?\d*)", _I),
    re.compile(r"Open\s*Credit[\s:]*\$?\s*-?\s*([\d,]+\.?\d*)", _I),
    re.compile(r"Item\s*Subtotal\s*\$\s*(-?[\d,]+\.?\d*)", _I),
    re.compile(r"(?:Amount\s*Due|Balance\s*Due)[:\s]*[-(]?\$?\s*([\d,]+\.?\d*)\)?", _I),
    re.compile(r"Credit\s*Amount[:\s]*[-(]?\$?\s*([\d,]+\.?\d*)\)?", _I),
    re.compile(r"[-(]\$?\s*([\d,]+\.?\d*)\)?", _I),
)

CONTRACT_RE = re.compile(r"(?:Customer\s*Contract|Contract)\s*#?[:\s]*([A-Z0-9-]+)", _I)
PO_PATTERNS = (
    re.compile(r"PO\s*Number[:\s]*([A-Z0-9-]+)", _I),
    re.compile(r"(?:^|\s)PO[:\s#]*([A-Z0-9-]+)", _I | re.MULTILINE),
)

SERVICES_PATTERNS = (
    re.compile(
        r"Description[\s\S]{0,150}?Week\s+Ending\s+Date[\s\S]{0,150}?Qty[\s\S]{0,150}?UOM[\s\S]{0,150}?"
        r"Unit\s+Price[\s\S]{0,150}?Taxable[\s\S]{0,150}?Extended\s+Price([\s\S]{0,1500}?)"
        r"(?:Item\s+Subtotal|Special\s+Instructions|Page\s+\d+)",
        _I,
    ),
    re.compile(r"Quantity\s*Description\s*Taxable\s*Ext\s+Price([\s\S]{0,8000}?)Item\s+Subtotal", _I),
    re.compile(
        r"(?:Description|Services|Items)[:\s]*\n([\s\S]{0,800}?)"
        r"(?:Item\s+Subtotal|Special\s+Instructions|Transaction\s+Type|Page\s+\d+)",
        _I,
    ),
    re.compile(
        r"Transaction\s+Type[\s\S]{0,300}?Currency[\s\S]{0,200}?([\s\S]{0,1000}?)"
        r"(?:Item\s+Subtotal|Special\s+Instructions|Page\s+\d+)",
        _I,
    ),
)

SERVICES_HEADER_RE = re.compile(
    r"^(?:Taxable\s*Extended\s*Price\s*|Week\s+Ending\s+Date\s*Qty\s*UOM\s*Unit\s*Price\s*"
    r"|Quantity\s*Description\s*Taxable\s*Ext\s+Price\s*)",
    _I,
)
# Applied in order; each pair is (pattern, replacement).
SERVICES_NOISE = (
    (re.compile(r"\s+Yes\s+\$[\d,]+\.\d+"), ""),
    (re.compile(r"\s+Yes\s+\$[\d,]+"), ""),
    (re.compile(r"\s+No\s+\$[\d,]+\.\d+"), ""),
    (re.compile(r"\s+No\s+\$[\d,]+"), ""),
    (re.compile(r"\s+Yes\s+"), " "),
    (re.compile(r"\s+No\s+"), " "),
    (re.compile(r"^\d+\s+", re.MULTILINE), ""),
    (re.compile(r"\s+\d+\s+"), " "),
    (re.compile(r"Invoice\s+Number:\s*\d+\s+Invoice\s+Date:\s*[\d-]+", _I), ""),
    (re.compile(r"\s+"), " "),
)
ADDRESS_MARKERS_RE = re.compile(r"(?:BILL\s+TO|SHIP\s+TO|ATTN:|GPO\s+Box|c/o\s+Shared\s+Services)", _I)
SERVICE_KEYWORDS_RE = re.compile(
    r"(?:Professional\s+Services|Subscription|Maintenance|Support|License|Training|Implementation"
    r"|Integration|Annual|Monthly|Quarterly|Fee)",
    _I,
)


@dataclass(frozen=True)
class ExtractionDiagnostic:
    """A field that fell back to a default instead of being read off the PDF."""

    field: str
    reason: str
    fallback_value: Any


@dataclass
class InvoiceFields:
    """Everything extracted from one invoice PDF."""

    invoice_number: str = ""
    client: str = UNKNOWN_CLIENT
    currency: str = DEFAULT_CURRENCY
    invoice_date: str = ""
    due_date: str = ""
    amount_due: float = 0.0
    customer_contract: str = ""
    oracle_contract: str = ""
    po_number: str = ""
    services: str = NO_SERVICES
    invoice_type: str = InvoiceType.PS.value
    frequency: str = Frequency.ADHOC.value
    diagnostics: list[ExtractionDiagnostic] = field(default_factory=list)

    def to_record(self) -> dict[str, Any]:
        """Column values for persistence (diagnostics excluded)."""
        record = asdict(self)
        record.pop("diagnostics")
        return record


def _first_match(patterns, text: str) -> re.Match | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def _extract_invoice_number(text: str) -> str:
    match = _first_match(INVOICE_NUMBER_PATTERNS, text)
    if not match:
        return ""
    number = match.group(1).strip()
    if number == "Total" or not re.search(r"\d", number):
        return ""
    return number[:MAX_INVOICE_NUMBER_LENGTH]


def _merge_continuation(lines: list[str], index: int, candidate: str) -> str:
    if index + 1 < len(lines) and CONTINUATION_RE.match(lines[index + 1]):
        return f"{candidate} {lines[index + 1]}"
    return candidate


def _client_from_bill_to(text: str) -> str | None:
    section = BILL_TO_RE.search(text)
    if not section:
        return None
    lines = [line.strip() for line in section.group(1).split("\n") if line.strip()]

    for index, line in enumerate(lines):
        if MINISTER_RE.search(line):
            candidate = _merge_continuation(lines, index, MINISTER_PREFIX_RE.sub("", line).strip())
            if len(candidate) > 3:
                return candidate[:MAX_CLIENT_LENGTH]

    for index, line in enumerate(lines):
        if any(pattern.search(line) for pattern in BILL_TO_SKIP_PATTERNS):
            continue
        if len(line) > 5 and not line[0].isdigit():
            candidate = _merge_continuation(lines, index, line)
            if len(candidate) > 3:
                return candidate[:MAX_CLIENT_LENGTH]
    return None


def _client_from_label(text: str) -> str | None:
    match = CLIENT_LABEL_RE.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    if len(value) <= 3 or CLIENT_LABEL_REJECT_RE.match(value):
        return None
    return CLIENT_CHARS_RE.sub("", value)[:MAX_CLIENT_LENGTH]


def _client_from_to_header(text: str) -> str | None:
    match = TO_HEADER_RE.search(text)
    if not match:
        return None
    value = match.group(1).strip()
    if TO_HEADER_REJECT_RE.match(value):
        return None
    return CLIENT_CHARS_RE.sub("", value)[:MAX_CLIENT_LENGTH]


def _client_from_filename(original_filename: str | None) -> str | None:
    if not original_filename:
        return None
    match = FILENAME_CLIENT_RE.search(original_filename)
    if not match:
        return None
    return match.group(1).strip()[:MAX_CLIENT_LENGTH]


CLIENT_STRATEGIES = (_client_from_bill_to, _client_from_label, _client_from_to_header)


def _extract_client(text: str, original_filename: str | None) -> str:
    for strategy in CLIENT_STRATEGIES:
        client = strategy(text)
        if client:
            return client
    return _client_from_filename(original_filename) or ""


def _extract_currency(text: str) -> str:
    match = CURRENCY_RE.search(text)
    if match:
        return match.group(1).upper()
    if "$" in text and "AUD" in text:
        return "AUD"
    if "€" in text:
        return "EUR"
    if "£" in text:
        return "GBP"
    return DEFAULT_CURRENCY


def _extract_date(patterns, text: str, invoice_number: str) -> str | None:
    match = _first_match(patterns, text)
    if not match:
        return None
    return parse_date(match.group(1).strip(), invoice_number)


def _extract_amount(text: str) -> float | None:
    match = _first_match(AMOUNT_PATTERNS, text)
    if not match:
        return None
    captured = match.group(1) or match.group(0)
    try:
        amount = float(captured.replace(",", "").replace("$", ""))
    except ValueError:
        return None
    if "-" in match.group(0) or "(" in match.group(0) or captured.startswith("-"):
        amount = -abs(amount)
    return amount


def _extract_po_number(text: str) -> str:
    match = _first_match(PO_PATTERNS, text)
    return match.group(1).strip()[:MAX_REFERENCE_LENGTH] if match else ""


def _clean_services(raw: str) -> str:
    services = raw
    repeated_header = services.find("Invoice Number:")
    if repeated_header > 0:
        services = services[:repeated_header]
    services = SERVICES_HEADER_RE.sub("", services, count=1)
    for pattern, replacement in SERVICES_NOISE:
        services = pattern.sub(replacement, services)
    return services.strip()


def _looks_like_address(services: str) -> bool:
    return bool(ADDRESS_MARKERS_RE.search(services[:200])) and not SERVICE_KEYWORDS_RE.search(services)


def _extract_services(text: str) -> str:
    for pattern in SERVICES_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            services = _clean_services(match.group(1).strip())
            if not services or _looks_like_address(services):
                return ""
            return services[:MAX_SERVICES_LENGTH]
    return ""


def _record_fallback(
    fields: InvoiceFields,
    context: LogContext,
    field_name: str,
    reason: str,
    fallback_value: Any,
) -> None:
    fields.diagnostics.append(ExtractionDiagnostic(field=field_name, reason=reason, fallback_value=fallback_value))
    logger.warning(
        "extraction.fallback",
        extra=build_log_event(
            "extraction.fallback",
            context,
            field=field_name,
            reason=reason,
            fallback_value=fallback_value,
        ),
    )


def extract_invoice_fields(
    text: str | None,
    original_filename: str | None = None,
    today: date | None = None,
) -> InvoiceFields:
    """Extract an ``InvoiceFields`` record from raw PDF text."""
    text = text or ""
    today = today or date.today()
    fields = InvoiceFields()

    fields.invoice_number = _extract_invoice_number(text)
    context = LogContext(invoice_number=fields.invoice_number or None, source_file=original_filename)

    client = _extract_client(text, original_filename)
    if len(client) < 3:
        client = UNKNOWN_CLIENT
        _record_fallback(fields, context, "client", "no client name found", client)
    fields.client = client

    fields.currency = _extract_currency(text)

    invoice_date = _extract_date(INVOICE_DATE_PATTERNS, text, fields.invoice_number)
    if not invoice_date:
        invoice_date = today.isoformat()
        _record_fallback(fields, context, "invoice_date", "no parseable invoice date", invoice_date)
    fields.invoice_date = invoice_date

    due_date = _extract_date(DUE_DATE_PATTERNS, text, fields.invoice_number)
    if not due_date:
        due_date = (today + timedelta(days=DUE_DATE_FALLBACK_DAYS)).isoformat()
        _record_fallback(fields, context, "due_date", "no parseable due date", due_date)
    fields.due_date = due_date

    amount = _extract_amount(text)
    if amount is None:
        amount = 0.0
        _record_fallback(fields, context, "amount_due", "no amount found", amount)
    fields.amount_due = amount

    contract = CONTRACT_RE.search(text)
    fields.customer_contract = contract.group(1).strip()[:MAX_REFERENCE_LENGTH] if contract else ""
    fields.po_number = _extract_po_number(text)

    services = _extract_services(text)
    if not services:
        services = NO_SERVICES
        _record_fallback(fields, context, "services", "no service description found", services)
    fields.services = services

    fields.invoice_type = classify_invoice_type(fields.services, fields.invoice_number, fields.amount_due).value
    fields.frequency = detect_frequency(fields.services, fields.amount_due).value
    return fields

"""Billing cadence detection from the extracted services text."""

from __future__ import annotations

import re
from collections.abc import Callable

from app.core.enums import Frequency

QUARTER_CODE_RE = re.compile(r"\bq[1-4]\b", re.IGNORECASE)
QUARTER_MONTH_PAIR_RE = re.compile(r"\b(jan|apr|jul|oct)[\s-]+(apr|jul|oct|jan)\b", re.IGNORECASE)


def _is_monthly(text: str) -> bool:
    return "monthly" in text


def _is_quarterly(text: str) -> bool:
    return (
        any(term in text for term in ("quarterly", "quarter", "3 month", "three month", "every 3 months"))
        or bool(QUARTER_CODE_RE.search(text))
        or bool(QUARTER_MONTH_PAIR_RE.search(text))
    )


def _is_bi_annual(text: str) -> bool:
    return any(term in text for term in ("bi-annual", "semi-annual", "6 month", "six month", "every 6 months"))


def _is_tri_annual(text: str) -> bool:
    return any(term in text for term in ("tri-annual", "4 month", "four month", "every 4 months"))


def _is_annual(text: str) -> bool:
    # "semi-annual" and friends contain "annual"; they are claimed above.
    return ("annual" in text or "yearly" in text) and not any(
        term in text for term in ("bi-annual", "semi-annual", "tri-annual")
    )


FREQUENCY_RULES: tuple[tuple[Callable[[str], bool], Frequency], ...] = (
    (_is_monthly, Frequency.MONTHLY),
    (_is_quarterly, Frequency.QUARTERLY),
    (_is_bi_annual, Frequency.BI_ANNUAL),
    (_is_tri_annual, Frequency.TRI_ANNUAL),
    (_is_annual, Frequency.ANNUAL),
)


def detect_frequency(services: str | None, amount: float | None = None) -> Frequency:
    """Map services text to a recurrence cadence; ``adhoc`` when nothing matches."""
    if not services:
        return Frequency.ADHOC

    lowered = services.lower()
    for predicate, result in FREQUENCY_RULES:
        if predicate(lowered):
            return result
    return Frequency.ADHOC

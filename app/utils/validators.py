"""Deterministic validators and sanitizers used across services and API."""

from __future__ import annotations

import re
from datetime import date

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def sanitize_text(value: str | None, max_len: int = 20000) -> str:
    """Sanitize free-form content before persistence/display."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    cleaned = cleaned[:max_len]
    return cleaned


def normalize_key(value: str | None) -> str:
    """Normalise a free-text join key (client, contract, invoice number) for comparison."""
    return sanitize_text(value).lower()


def is_iso_date(value: str | None) -> bool:
    """True when value is a real calendar date written as YYYY-MM-DD."""
    if not value or not ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True

from __future__ import annotations

from app.utils.validators import is_iso_date, normalize_key, sanitize_text


def test_sanitize_text_strips_null_and_trims():
    assert sanitize_text("  hello\x00world  ") == "helloworld"
    assert sanitize_text(None) == ""
    assert sanitize_text("abcdef", max_len=3) == "abc"


def test_normalize_key_lowercases_and_trims():
    assert normalize_key("  Acme Health ") == "acme health"
    assert normalize_key(None) == ""


def test_is_iso_date():
    assert is_iso_date("2025-02-28") is True
    assert is_iso_date("2025-02-30") is False
    assert is_iso_date("28-02-2025") is False
    assert is_iso_date("") is False
    assert is_iso_date(None) is False

from __future__ import annotations

from datetime import date

import pytest

from app.parsing.dates import add_months, date_format_for_invoice_number, format_date_for_display, parse_date


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12-Mar-2025", "2025-03-12"),
        ("01-Jan-2024", "2024-01-01"),
        ("5 September 2023", "2023-09-05"),
        ("15 january 25", "2025-01-15"),
        ("28/feb/2024", "2024-02-28"),
    ],
)
def test_named_month_dates(raw, expected):
    assert parse_date(raw) == expected


def test_day_first_when_first_part_exceeds_twelve():
    assert parse_date("25-03-2025") == "2025-03-25"
    assert parse_date("25-03-2025", "4612345") == "2025-03-25"


def test_month_first_when_second_part_exceeds_twelve():
    assert parse_date("03/25/2025") == "2025-03-25"
    assert parse_date("03/25/2025", "4012345") == "2025-03-25"


def test_ambiguous_dates_follow_invoice_number_series():
    assert parse_date("05-03-2025", "4612345") == "2025-05-03"
    assert parse_date("05-03-2025", "4912345") == "2025-05-03"
    assert parse_date("05-03-2025", "4012345") == "2025-03-05"
    assert parse_date("05-03-2025") == "2025-03-05"


def test_two_digit_years_are_two_thousands():
    assert parse_date("12-03-25") == "2025-03-12"


def test_day_overflow_rolls_into_next_month():
    assert parse_date("31-02-2025") == "2025-03-03"


@pytest.mark.parametrize(
    "raw",
    [None, "", "not a date", "2025", "12-13-14-15", "ab-cd-2025", "00-13-2025", "32-01-2025", "13-13-2025", "12-Foo-2025"],
)
def test_unparseable_inputs_return_none(raw):
    assert parse_date(raw) is None


def test_non_string_input_returns_none():
    assert parse_date(20250312) is None  # type: ignore[arg-type]


def test_date_format_for_invoice_number():
    assert date_format_for_invoice_number("4712345") == "us"
    assert date_format_for_invoice_number(" 4812345") == "us"
    assert date_format_for_invoice_number("5012345") == "international"
    assert date_format_for_invoice_number(None) == "international"


def test_format_date_for_display():
    assert format_date_for_display("2025-03-05") == "05-Mar-25"
    assert format_date_for_display("2025-12-31T00:00:00") == "31-Dec-25"
    assert format_date_for_display("") == ""
    assert format_date_for_display("2025-13-01") == ""
    assert format_date_for_display("garbage") == ""


def test_add_months_clamps_to_month_end():
    assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)
    assert add_months(date(2025, 1, 10), 12) == date(2026, 1, 10)

import logging

import pytest

from receipt_report.normalizer import format_date_for_display, parse_amount, parse_date
from receipt_report.report_models import OrdinalDate


@pytest.mark.parametrize("text,expected", [
    ("$1,234.56", 1234.56),
    ("USD 45.50", 45.5),
    ("120", 120.0),
    ("-$12.00", -12.0),
    ("$-12.00", -12.0),
    ("USD -5.00", -5.0),
    ("12-34", 1234.0),
    (" $0.99 ", 0.99),
    (42, 42.0),
])
def test_parse_amount_strips_currency_and_commas(text, expected):
    assert parse_amount(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", [None, "", "   ", "abc", "$", "1.2.3"])
def test_parse_amount_unusable_is_zero(text):
    assert parse_amount(text) == 0.0


def test_parse_date_short_us_year_is_2000s():
    d = parse_date("1/5/24")
    assert d == OrdinalDate(2024, 1, 5)
    assert d.key == 20240105


@pytest.mark.parametrize("text,expected", [
    ("01/05/2024", OrdinalDate(2024, 1, 5)),
    ("1-5-24", OrdinalDate(2024, 1, 5)),
    ("12-31-1999", OrdinalDate(1999, 12, 31)),
    ("2024-01-05", OrdinalDate(2024, 1, 5)),
    ("2024-1-5T10:30:00Z", OrdinalDate(2024, 1, 5)),
    ("  3/7/99 ", OrdinalDate(2099, 3, 7)),
])
def test_parse_date_formats(text, expected):
    assert parse_date(text) == expected


@pytest.mark.parametrize("text", ["13/01/24", "0/10/24", "1/32/24", "1/5/1899", "2101-01-01", "1/5/024"])
def test_parse_date_out_of_range_is_none(text):
    assert parse_date(text) is None


def test_parse_date_garbage_logs_warning_instead_of_raising(caplog):
    with caplog.at_level(logging.WARNING, logger="receipt_report.normalizer"):
        assert parse_date("TOTAL DUE") is None
    assert "TOTAL DUE" in caplog.text


def test_parse_date_empty_is_none_without_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="receipt_report.normalizer"):
        assert parse_date("") is None
        assert parse_date(None) is None
    assert caplog.text == ""


@pytest.mark.parametrize("text,expected", [
    ("1/5/24", "01/05/2024"),
    ("9/15/25", "09/15/2025"),
    ("12/1/23", "12/01/2023"),
    ("2024-02-29", "02/29/2024"),
])
def test_format_date_for_display(text, expected):
    assert format_date_for_display(text) == expected


def test_format_date_for_display_keeps_unparsable_text():
    assert format_date_for_display("Jan fifth") == "Jan fifth"
    assert format_date_for_display(None) == ""

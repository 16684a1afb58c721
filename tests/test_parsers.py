"""Tests for amount and journal line parsing."""

from decimal import Decimal

import pytest

from ledgerkit.utils import parse_amount, parse_line


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1234.56", Decimal("1234.56")),
        ("$1,234.56", Decimal("1234.56")),
        (" 0.10 ", Decimal("0.10")),
        ("€5", Decimal("5")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_parse_amount_keeps_exact_digits():
    assert str(parse_amount("100.10")) == "100.10"


def test_parse_negative_amount():
    assert parse_amount("-12.50", allow_negative=True) == Decimal("-12.50")
    assert parse_amount("(12.50)", allow_negative=True) == Decimal("-12.50")

    with pytest.raises(ValueError, match="negative"):
        parse_amount("(12.50)")


@pytest.mark.parametrize("text", ["", "   ", "abc", "1.2.3", "inf", "NaN"])
def test_parse_invalid_amount(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_debit_line():
    line = parse_line("1001 dr 1000")

    assert line.account == "1001"
    assert line.debit_amount == Decimal("1000")
    assert line.credit_amount == Decimal("0")
    assert line.description is None


def test_parse_credit_line_with_description():
    line = parse_line("3001 CREDIT 1,000.00 Owner investment")

    assert line.account == "3001"
    assert line.debit_amount == Decimal("0")
    assert line.credit_amount == Decimal("1000.00")
    assert line.description == "Owner investment"


@pytest.mark.parametrize("text", ["1001 dr", "1001 xx 5", "1001 dr -5", "1001 cr abc"])
def test_parse_invalid_line(text):
    with pytest.raises(ValueError):
        parse_line(text)

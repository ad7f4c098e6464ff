"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from emitrack.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1000", Decimal("1000")),
        ("1,250.50", Decimal("1250.50")),
        ("₹12,000", Decimal("12000")),
        ("$12.99", Decimal("12.99")),
        ("Rs.500", Decimal("500")),
        (" 0 ", Decimal("0")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_parse_amount_rejects_negative():
    with pytest.raises(ValueError, match="cannot be negative"):
        parse_amount("-50")

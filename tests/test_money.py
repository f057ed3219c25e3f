"""Tests for money helpers and amount parsing."""

import pytest
from decimal import Decimal

from ledgerkit.domain.errors import InvalidAmountError
from ledgerkit.domain.money import format_brl, from_cents, require_positive, round2, to_cents
from ledgerkit.utils.amount_parser import parse_amount


def test_round2_half_up():
    """Half cents round away from zero."""
    assert round2("0.005") == Decimal("0.01")
    assert round2("2.675") == Decimal("2.68")
    assert round2("-1.005") == Decimal("-1.01")


def test_round2_float_uses_decimal_text():
    """Floats are converted through their text form."""
    assert round2(0.1 + 0.2) == Decimal("0.30")


def test_require_positive_rejects_zero_and_negative():
    with pytest.raises(InvalidAmountError):
        require_positive("0")
    with pytest.raises(InvalidAmountError):
        require_positive("-10")
    # Rounds to zero
    with pytest.raises(InvalidAmountError):
        require_positive("0.004")


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True, ""])
def test_require_positive_rejects_malformed(value):
    with pytest.raises(InvalidAmountError):
        require_positive(value)


def test_cents_conversion():
    assert to_cents("1234.56") == 123456
    assert to_cents(Decimal("0.015")) == 2
    assert from_cents(-705) == Decimal("-7.05")


def test_format_brl():
    assert format_brl("1234.5") == "R$ 1.234,50"
    assert format_brl("-0.99") == "-R$ 0,99"
    assert format_brl("1000000") == "R$ 1.000.000,00"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("123,45", Decimal("123.45")),
        ("R$ 1.234,56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("1.234", Decimal("1234")),
        ("-50,5", Decimal("-50.5")),
        ("$300", Decimal("300")),
    ],
)
def test_parse_amount_formats(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "R$", "dez reais"])
def test_parse_amount_invalid(text):
    with pytest.raises(InvalidAmountError):
        parse_amount(text)

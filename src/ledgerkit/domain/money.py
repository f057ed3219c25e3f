"""Fixed-point money helpers.

Amounts are ``Decimal`` values quantized to two places with half-up
rounding in the domain layer, and integer cents in storage.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from ledgerkit.domain.errors import InvalidAmountError, non_positive_amount

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

AmountLike = Union[Decimal, int, str]


def to_decimal(value: AmountLike) -> Decimal:
    """Convert a value to Decimal without rounding.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            # str() keeps floats from leaking binary noise into the Decimal
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(f"Invalid amount: {value!r}")
    if not result.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value!r}")
    return result


def round2(value: AmountLike) -> Decimal:
    """Round to two decimal places, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: AmountLike) -> Decimal:
    """Parse and normalize a monetary amount."""
    return round2(value)


def require_positive(value: AmountLike) -> Decimal:
    """Normalize an amount and ensure it is greater than zero.

    Raises:
        InvalidAmountError: If the amount is malformed, zero or negative
    """
    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmountError(non_positive_amount(amount))
    return amount


def to_cents(value: AmountLike) -> int:
    """Convert an amount to integer cents."""
    return int(round2(value) * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal."""
    return (Decimal(cents) / 100).quantize(CENT)


def format_brl(value: AmountLike) -> str:
    """Format an amount the way the ledger screens show it (``R$ 1.234,56``)."""
    amount = round2(value)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {text}"

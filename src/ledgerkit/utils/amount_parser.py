"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from ledgerkit.domain.errors import InvalidAmountError


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles both Brazilian and English notation:
    - "123.45", "123,45"
    - "R$ 1.234,56"
    - "1,234.56"
    - "-123,45"

    The right-most of ``.``/``,`` is taken as the decimal separator when it
    is followed by one or two digits; any other separator groups thousands.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        InvalidAmountError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise InvalidAmountError("Empty amount string")

    original = amount_str
    amount_str = re.sub(r"(R\$|[$€£]|\s)", "", amount_str, flags=re.IGNORECASE)

    match = re.search(r"[.,](\d{1,2})$", amount_str)
    if match:
        integer_part = re.sub(r"[.,]", "", amount_str[: match.start()])
        amount_str = f"{integer_part}.{match.group(1)}"
    else:
        amount_str = re.sub(r"[.,]", "", amount_str)

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise InvalidAmountError(f"Could not parse amount '{original}'")
    if not amount.is_finite():
        raise InvalidAmountError(f"Could not parse amount '{original}'")
    return amount

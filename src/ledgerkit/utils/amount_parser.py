"""Amount parsing utilities."""

import re
from decimal import Decimal, InvalidOperation

CURRENCY_SYMBOLS = re.compile(r"[$€£¥₹]")


def parse_amount(amount_str: str, allow_negative: bool = False) -> Decimal:
    """Parse an amount string into an exact Decimal.

    Accepts "1234.56", "$1,234.56" and, when ``allow_negative`` is set,
    "-12.50" or "(12.50)". Line amounts are always positive; the side is
    given separately.

    Args:
        amount_str: Amount string
        allow_negative: Accept negative amounts (opening balances)

    Returns:
        Decimal amount

    Raises:
        ValueError: If the string is not a finite amount or is negative
            while negatives are not allowed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]
    text = CURRENCY_SYMBOLS.sub("", text).replace(",", "").strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    if negative:
        amount = -amount
    if amount < 0 and not allow_negative:
        raise ValueError(f"Amount cannot be negative: '{amount_str}'")
    return amount

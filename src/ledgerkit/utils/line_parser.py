"""Parsing of journal lines given on the command line."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ledgerkit.utils.amount_parser import parse_amount

DEBIT_SIDES = {"dr", "debit"}
CREDIT_SIDES = {"cr", "credit"}


@dataclass(frozen=True)
class ParsedLine:
    """A line as typed by the user, before the account is resolved."""

    account: str
    debit_amount: Decimal
    credit_amount: Decimal
    description: Optional[str] = None


def parse_line(text: str) -> ParsedLine:
    """Parse "ACCOUNT dr|cr AMOUNT [DESCRIPTION]".

    Examples:
        "1001 dr 1000"
        "3001 cr 1,000.00 Owner investment"

    Raises:
        ValueError: If the line does not follow the format
    """
    parts = text.split(None, 3)
    if len(parts) < 3:
        raise ValueError(f"Invalid line '{text}': expected 'ACCOUNT dr|cr AMOUNT [DESCRIPTION]'")

    account, side, amount_str = parts[0], parts[1].lower(), parts[2]
    amount = parse_amount(amount_str)
    description = parts[3].strip() if len(parts) > 3 else None

    if side in DEBIT_SIDES:
        return ParsedLine(account, amount, Decimal("0"), description)
    if side in CREDIT_SIDES:
        return ParsedLine(account, Decimal("0"), amount, description)
    raise ValueError(f"Invalid line '{text}': side must be 'dr' or 'cr', got '{parts[1]}'")

"""Journal line validation shared by the journal service and the posting engine."""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Sequence

from ledgerkit.domain.entities import ZERO, JournalLine, JournalLineInput
from ledgerkit.domain.errors import (
    InvalidLineError,
    TooFewLinesError,
    UnbalancedEntryError,
    unbalanced_entry,
)

MIN_LINES = 2
MAX_LINE_DESCRIPTION_LENGTH = 200


def to_amount(value, line_number: int, side: str) -> Decimal:
    """Coerce a line amount to a finite Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        raise InvalidLineError(
            f"Line {line_number}: {side} amount {value!r} is a float; pass a Decimal or string"
        )
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidLineError(f"Line {line_number}: invalid {side} amount '{value}'")
    if not amount.is_finite():
        raise InvalidLineError(f"Line {line_number}: invalid {side} amount '{value}'")
    return amount


def check_line_count(lines: Sequence) -> None:
    if len(lines) < MIN_LINES:
        raise TooFewLinesError(
            f"Journal entry must have at least {MIN_LINES} lines, got {len(lines)}"
        )


def check_line_amounts(line_number: int, debit: Decimal, credit: Decimal) -> None:
    """A line carries exactly one strictly positive side."""
    if debit < 0 or credit < 0:
        raise InvalidLineError(f"Line {line_number}: amounts cannot be negative")
    if debit > 0 and credit > 0:
        raise InvalidLineError(f"Line {line_number}: cannot have both a debit and a credit")
    if debit == 0 and credit == 0:
        raise InvalidLineError(f"Line {line_number}: needs a debit or a credit amount")


def normalize_line_inputs(lines: Iterable[JournalLineInput]) -> list[JournalLineInput]:
    """Validate line shapes and return them with Decimal amounts.

    Raises:
        TooFewLinesError: If fewer than two lines are given
        InvalidLineError: If a line is malformed
    """
    lines = list(lines)
    check_line_count(lines)

    normalized = []
    for number, line in enumerate(lines, start=1):
        if not isinstance(line.account_id, int) or isinstance(line.account_id, bool):
            raise InvalidLineError(f"Line {number}: account is required")
        debit = to_amount(line.debit_amount, number, "debit")
        credit = to_amount(line.credit_amount, number, "credit")
        check_line_amounts(number, debit, credit)

        description = line.description.strip() if line.description else None
        if description and len(description) > MAX_LINE_DESCRIPTION_LENGTH:
            raise InvalidLineError(
                f"Line {number}: description cannot exceed {MAX_LINE_DESCRIPTION_LENGTH} characters"
            )
        normalized.append(
            JournalLineInput(
                account_id=line.account_id,
                debit_amount=debit,
                credit_amount=credit,
                description=description or None,
            )
        )
    return normalized


def line_totals(lines: Iterable[JournalLine | JournalLineInput]) -> tuple[Decimal, Decimal]:
    """Sum debits and credits exactly."""
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        total_debit += line.debit_amount
        total_credit += line.credit_amount
    return total_debit, total_credit


def ensure_balanced(total_debit: Decimal, total_credit: Decimal, tolerance: Decimal) -> None:
    """Raise UnbalancedEntryError unless debits and credits agree within tolerance."""
    if abs(total_debit - total_credit) >= tolerance:
        raise UnbalancedEntryError(unbalanced_entry(total_debit, total_credit))

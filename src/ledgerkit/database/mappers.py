"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay stable
when the table layout changes.
"""

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    Account as ORMAccount,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        account_type=orm_account.account_type,
        sub_type=orm_account.sub_type,
        parent_id=orm_account.parent_id,
        level=orm_account.level,
        is_active=orm_account.is_active,
        balance=orm_account.balance,
        opening_balance=orm_account.opening_balance,
        currency=orm_account.currency,
        description=orm_account.description,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
        created_by=orm_account.created_by,
        updated_by=orm_account.updated_by,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        account_id=orm_line.account_id,
        account_code=orm_line.account_code,
        account_name=orm_line.account_name,
        description=orm_line.description,
        debit_amount=orm_line.debit_amount,
        credit_amount=orm_line.credit_amount,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model (with lines) to domain entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        journal_number=orm_entry.journal_number,
        entry_date=orm_entry.entry_date,
        narration=orm_entry.narration,
        reference=orm_entry.reference,
        status=orm_entry.status,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
        total_debit=orm_entry.total_debit,
        total_credit=orm_entry.total_credit,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
        created_by=orm_entry.created_by,
        updated_by=orm_entry.updated_by,
        posted_at=orm_entry.posted_at,
        posted_by=orm_entry.posted_by,
        reversal_entry_id=orm_entry.reversal_entry_id,
        original_entry_id=orm_entry.original_entry_id,
    )


def journal_lines_to_orm(lines: list[domain.JournalLine]) -> list[ORMJournalLine]:
    """Build ORM line rows, numbering positions in list order."""
    return [
        ORMJournalLine(
            position=position,
            account_id=line.account_id,
            account_code=line.account_code,
            account_name=line.account_name,
            description=line.description,
            debit_amount=line.debit_amount,
            credit_amount=line.credit_amount,
        )
        for position, line in enumerate(lines)
    ]


def posted_line_to_domain(
    orm_entry: ORMJournalEntry, orm_line: ORMJournalLine
) -> domain.PostedLine:
    """Flatten an entry header and one of its lines for reporting."""
    return domain.PostedLine(
        entry_id=orm_entry.id,
        journal_number=orm_entry.journal_number,
        entry_date=orm_entry.entry_date,
        narration=orm_entry.narration,
        account_id=orm_line.account_id,
        description=orm_line.description,
        debit_amount=orm_line.debit_amount,
        credit_amount=orm_line.credit_amount,
    )

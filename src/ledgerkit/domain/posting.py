"""Posting engine.

Posting applies a balanced draft entry to account balances and freezes it.
Everything happens inside one database transaction: the entry and every
touched account are locked, all checks run before the first balance moves,
and any failure rolls the whole unit back so a failed post changes nothing.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Optional

from ledgerkit.config import LedgerConfig
from ledgerkit.database.base import JOURNAL_SEQUENCE, Database
from ledgerkit.domain.entities import (
    ZERO,
    Account,
    EntryStatus,
    JournalEntry,
    JournalLine,
)
from ledgerkit.domain.errors import (
    AccountNotFoundError,
    EntryNotFoundError,
    IrreversibleEntryError,
    NotDraftError,
    NotPostedError,
    account_not_found,
    entry_not_draft,
    entry_not_found,
)
from ledgerkit.domain.validation import (
    check_line_amounts,
    check_line_count,
    ensure_balanced,
    line_totals,
)

logger = logging.getLogger(__name__)


def allocate_journal_number(db: Database, config: LedgerConfig) -> str:
    """Draw the next journal number from the locked counter."""
    return config.format_journal_number(db.next_sequence_value(JOURNAL_SEQUENCE))


def signed_deltas(lines: tuple[JournalLine, ...], accounts: dict[int, Account]) -> dict[int, Decimal]:
    """Net each account's lines onto its normal balance side.

    Debit-normal accounts move by debit - credit, credit-normal accounts by
    credit - debit.
    """
    deltas: dict[int, Decimal] = {}
    for line in lines:
        side = accounts[line.account_id].normal_side
        amount = side.signed_amount(line.debit_amount, line.credit_amount)
        deltas[line.account_id] = deltas.get(line.account_id, ZERO) + amount
    return deltas


class PostingEngine:
    """Applies journal entries to account balances."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize posting engine.

        Args:
            db: Database instance
            config: Ledger configuration (defaults apply if omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()

    def post(self, entry_id: int, actor_id: Optional[str] = None) -> JournalEntry:
        """Post a draft entry.

        Posting is not idempotent: a retry after success raises NotDraftError
        and changes nothing, which callers should treat as "already posted".

        Args:
            entry_id: Entry to post
            actor_id: Who is posting

        Returns:
            The posted entry with refreshed account snapshots on its lines

        Raises:
            EntryNotFoundError: If the entry does not exist
            NotDraftError: If the entry is not a draft
            UnbalancedEntryError: If debits and credits differ beyond tolerance
            AccountNotFoundError: If a line's account is missing or inactive
        """
        with self.db.transaction():
            posted = self._post_locked(entry_id, actor_id)

        logger.info(
            "Posted %s (debit %s, credit %s) by %s",
            posted.journal_number,
            posted.total_debit,
            posted.total_credit,
            actor_id,
        )
        return posted

    def reverse(
        self,
        entry_id: int,
        actor_id: Optional[str] = None,
        narration: Optional[str] = None,
        reversal_date: Optional[date] = None,
    ) -> JournalEntry:
        """Reverse a posted entry with a mirrored, immediately posted entry.

        The original is kept and marked reversed; history is never deleted.
        Inactive accounts may be touched by a reversal.

        Args:
            entry_id: Posted entry to reverse
            actor_id: Who is reversing
            narration: Narration for the reversing entry
            reversal_date: Date of the reversing entry (defaults to the original's)

        Returns:
            The posted reversing entry

        Raises:
            EntryNotFoundError: If the entry does not exist
            NotPostedError: If the entry is not posted (including already reversed)
            IrreversibleEntryError: If the entry is itself a reversal
        """
        with self.db.transaction():
            original = self.db.get_journal_entry(entry_id, for_update=True)
            if original is None:
                raise EntryNotFoundError(entry_not_found(entry_id))
            if original.status is not EntryStatus.POSTED:
                raise NotPostedError(
                    f"Cannot reverse journal entry {original.journal_number}: "
                    f"it is {original.status.value}, not posted"
                )
            if original.original_entry_id is not None:
                raise IrreversibleEntryError(
                    f"Journal entry {original.journal_number} is a reversal and cannot be reversed"
                )

            mirrored = [
                replace(line, debit_amount=line.credit_amount, credit_amount=line.debit_amount)
                for line in original.lines
            ]
            draft = self.db.create_journal_entry(
                journal_number=allocate_journal_number(self.db, self.config),
                entry_date=reversal_date or original.entry_date,
                narration=narration or f"Reversal of {original.journal_number}",
                lines=mirrored,
                reference=original.journal_number,
                created_by=actor_id,
                original_entry_id=original.id,
            )
            reversal = self._post_locked(draft.id, actor_id, allow_inactive=True)
            self.db.mark_entry_reversed(original.id, reversal.id, updated_by=actor_id)

        logger.info(
            "Reversed %s with %s by %s",
            original.journal_number,
            reversal.journal_number,
            actor_id,
        )
        return reversal

    def _post_locked(
        self, entry_id: int, actor_id: Optional[str], allow_inactive: bool = False
    ) -> JournalEntry:
        """Post inside the caller's transaction."""
        entry = self.db.get_journal_entry(entry_id, for_update=True)
        if entry is None:
            raise EntryNotFoundError(entry_not_found(entry_id))
        if entry.status is not EntryStatus.DRAFT:
            raise NotDraftError(entry_not_draft(entry.journal_number, entry.status.value, "post"))

        # Stored lines may have been changed since they were validated
        check_line_count(entry.lines)
        for number, line in enumerate(entry.lines, start=1):
            check_line_amounts(number, line.debit_amount, line.credit_amount)
        total_debit, total_credit = line_totals(entry.lines)
        ensure_balanced(total_debit, total_credit, self.config.balance_tolerance)

        accounts = self.db.lock_accounts([line.account_id for line in entry.lines])
        for line in entry.lines:
            account = accounts.get(line.account_id)
            if account is None:
                raise AccountNotFoundError(account_not_found(line.account_id))
            if not account.is_active and not allow_inactive:
                raise AccountNotFoundError(f"Account '{account.code}' is inactive")

        deltas = signed_deltas(entry.lines, accounts)
        for account_id in sorted(deltas):
            if deltas[account_id] != ZERO:
                self.db.apply_delta(account_id, deltas[account_id], updated_by=actor_id)

        refreshed = [
            replace(
                line,
                account_code=accounts[line.account_id].code,
                account_name=accounts[line.account_id].name,
            )
            for line in entry.lines
        ]
        return self.db.mark_entry_posted(entry_id, actor_id, datetime.now(UTC), refreshed)

"""Journal entry domain service."""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from ledgerkit.config import LedgerConfig
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    EntryStatus,
    JournalEntry,
    JournalLine,
    JournalLineInput,
)
from ledgerkit.domain.errors import (
    EntryNotFoundError,
    NotDraftError,
    UnknownAccountError,
    ValidationError,
    entry_not_draft,
    entry_not_found,
)
from ledgerkit.domain.posting import PostingEngine, allocate_journal_number
from ledgerkit.domain.validation import ensure_balanced, line_totals, normalize_line_inputs

logger = logging.getLogger(__name__)

MAX_NARRATION_LENGTH = 500
MAX_REFERENCE_LENGTH = 100


def coerce_status(value: EntryStatus | str) -> EntryStatus:
    """Accept an EntryStatus or its string value."""
    if isinstance(value, EntryStatus):
        return value
    try:
        return EntryStatus(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(s.value for s in EntryStatus)
        raise ValidationError(f"Invalid status '{value}'. Valid statuses: {valid}")


class JournalService:
    """Service for managing journal entries."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize journal service.

        Args:
            db: Database instance
            config: Ledger configuration (defaults apply if omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()
        self.posting = PostingEngine(db, self.config)

    def create_entry(
        self,
        narration: str,
        entry_date: date,
        lines: Iterable[JournalLineInput],
        reference: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> JournalEntry:
        """Create a draft journal entry.

        Args:
            narration: What the entry records
            entry_date: Accounting date of the entry
            lines: At least two lines, each with exactly one positive side
            reference: Optional external reference (invoice number, etc.)
            actor_id: Who is creating the entry

        Returns:
            The created draft entry with its journal number

        Raises:
            TooFewLinesError: If fewer than two lines are given
            InvalidLineError: If a line is malformed
            UnknownAccountError: If a line's account is missing or inactive
            UnbalancedEntryError: If debits and credits differ beyond tolerance
        """
        narration = self._validate_narration(narration)
        reference = self._validate_reference(reference)
        entry_date = self._validate_date(entry_date)

        with self.db.transaction():
            stored_lines = self._prepare_lines(lines)
            entry = self.db.create_journal_entry(
                journal_number=allocate_journal_number(self.db, self.config),
                entry_date=entry_date,
                narration=narration,
                lines=stored_lines,
                reference=reference,
                created_by=actor_id,
            )

        logger.info("Created draft %s with %d lines", entry.journal_number, len(entry.lines))
        return entry

    def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get entry by ID."""
        return self.db.get_journal_entry(entry_id)

    def get_entry_by_number(self, journal_number: str) -> Optional[JournalEntry]:
        """Get entry by journal number (e.g. JE000001)."""
        return self.db.get_journal_entry_by_number(journal_number.strip().upper())

    def require_entry(self, entry_id: int) -> JournalEntry:
        """Get entry by ID or raise EntryNotFoundError."""
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_not_found(entry_id))
        return entry

    def list_entries(
        self,
        status: EntryStatus | str | None = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[JournalEntry]:
        """List entries with optional filters.

        Args:
            status: Only entries in this status
            start_date: Earliest entry date (inclusive)
            end_date: Latest entry date (inclusive)
            account_id: Only entries with a line on this account
            search: Substring matched against number, narration and reference

        Returns:
            Entries ordered by date and journal number
        """
        if status is not None:
            status = coerce_status(status)
        return self.db.list_journal_entries(
            status=status,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            search=search,
        )

    def update_entry(
        self,
        entry_id: int,
        *,
        narration: Optional[str] = None,
        entry_date: Optional[date] = None,
        reference: Optional[str] = None,
        clear_reference: bool = False,
        lines: Optional[Iterable[JournalLineInput]] = None,
        actor_id: Optional[str] = None,
    ) -> JournalEntry:
        """Edit a draft entry.

        Given lines replace all existing lines and are validated like on create.
        A blank reference leaves it unchanged; pass clear_reference to remove it.

        Raises:
            EntryNotFoundError: If the entry does not exist
            NotDraftError: If the entry has been posted or reversed
        """
        if clear_reference and reference:
            raise ValidationError("Cannot set a reference and clear it at the same time")
        if narration is not None:
            narration = self._validate_narration(narration)
        if reference is not None:
            reference = self._validate_reference(reference)
        if entry_date is not None:
            entry_date = self._validate_date(entry_date)

        with self.db.transaction():
            entry = self.db.get_journal_entry(entry_id, for_update=True)
            if entry is None:
                raise EntryNotFoundError(entry_not_found(entry_id))
            if entry.status is not EntryStatus.DRAFT:
                raise NotDraftError(entry_not_draft(entry.journal_number, entry.status.value, "update"))

            stored_lines = self._prepare_lines(lines) if lines is not None else None
            return self.db.update_journal_entry(
                entry_id,
                entry_date=entry_date,
                narration=narration,
                reference=reference,
                lines=stored_lines,
                clear_reference=clear_reference,
                updated_by=actor_id,
            )

    def delete_entry(self, entry_id: int) -> None:
        """Delete a draft entry. Its journal number is not reused.

        Raises:
            EntryNotFoundError: If the entry does not exist
            NotDraftError: If the entry has been posted or reversed
        """
        with self.db.transaction():
            entry = self.db.get_journal_entry(entry_id, for_update=True)
            if entry is None:
                raise EntryNotFoundError(entry_not_found(entry_id))
            if entry.status is not EntryStatus.DRAFT:
                raise NotDraftError(entry_not_draft(entry.journal_number, entry.status.value, "delete"))
            self.db.delete_journal_entry(entry_id)

        logger.info("Deleted draft %s", entry.journal_number)

    def post_entry(self, entry_id: int, actor_id: Optional[str] = None) -> JournalEntry:
        """Post a draft entry to the ledger. See PostingEngine.post."""
        return self.posting.post(entry_id, actor_id)

    def reverse_entry(
        self,
        entry_id: int,
        actor_id: Optional[str] = None,
        narration: Optional[str] = None,
        reversal_date: Optional[date] = None,
    ) -> JournalEntry:
        """Reverse a posted entry. See PostingEngine.reverse."""
        if narration is not None:
            narration = self._validate_narration(narration)
        if reversal_date is not None:
            reversal_date = self._validate_date(reversal_date)
        return self.posting.reverse(
            entry_id, actor_id, narration=narration, reversal_date=reversal_date
        )

    def _prepare_lines(self, lines: Iterable[JournalLineInput]) -> list[JournalLine]:
        """Validate lines against the registry and attach account snapshots."""
        normalized = normalize_line_inputs(lines)

        stored = []
        for number, line in enumerate(normalized, start=1):
            account = self.db.get_account(line.account_id)
            if account is None:
                raise UnknownAccountError(f"Line {number}: account {line.account_id} not found")
            if not account.is_active:
                raise UnknownAccountError(f"Line {number}: account '{account.code}' is inactive")
            stored.append(
                JournalLine(
                    account_id=account.id,
                    account_code=account.code,
                    account_name=account.name,
                    description=line.description,
                    debit_amount=line.debit_amount,
                    credit_amount=line.credit_amount,
                )
            )

        total_debit, total_credit = line_totals(stored)
        ensure_balanced(total_debit, total_credit, self.config.balance_tolerance)
        return stored

    @staticmethod
    def _validate_narration(narration: str) -> str:
        narration = (narration or "").strip()
        if not narration:
            raise ValidationError("Narration is required")
        if len(narration) > MAX_NARRATION_LENGTH:
            raise ValidationError(f"Narration cannot exceed {MAX_NARRATION_LENGTH} characters")
        return narration

    @staticmethod
    def _validate_reference(reference: Optional[str]) -> Optional[str]:
        if reference is None:
            return None
        reference = reference.strip()
        if len(reference) > MAX_REFERENCE_LENGTH:
            raise ValidationError(f"Reference cannot exceed {MAX_REFERENCE_LENGTH} characters")
        return reference or None

    @staticmethod
    def _validate_date(value: date) -> date:
        if isinstance(value, datetime):
            return value.date()
        if not isinstance(value, date):
            raise ValidationError(f"Invalid entry date '{value}'")
        return value

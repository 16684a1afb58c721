"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    Account,
    AccountSubType,
    AccountType,
    EntryStatus,
    JournalEntry,
    JournalLine,
    PostedLine,
)


# Counter row that journal numbers are drawn from
JOURNAL_SEQUENCE = "journal_entry"


class Database(ABC):
    """Abstract database interface for ledgerkit.

    Every method runs in its own transaction unless it is called inside
    ``transaction()``, in which case it joins that unit of work.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Group subsequent calls into one all-or-nothing unit of work.

        Commits when the block exits normally and rolls back everything on
        any exception. Nested use joins the outer transaction.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        sub_type: AccountSubType,
        parent_id: Optional[int] = None,
        level: int = 0,
        opening_balance: Decimal = Decimal("0"),
        currency: str = "USD",
        description: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> Account:
        """Create an account whose balance starts at its opening balance."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        include_inactive: bool = True,
        search: Optional[str] = None,
    ) -> list[Account]:
        """List accounts ordered by code."""
        pass

    @abstractmethod
    def list_child_accounts(self, parent_id: int) -> list[Account]:
        """List direct children of an account."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **fields: Any) -> Account:
        """Overwrite the given account columns. Balances are not updatable here."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Hard-delete an account."""
        pass

    @abstractmethod
    def count_account_lines(self, account_id: int) -> int:
        """Count journal lines (any status) referencing an account."""
        pass

    @abstractmethod
    def lock_accounts(self, account_ids: list[int]) -> dict[int, Account]:
        """Row-lock accounts in ascending id order and return those that exist."""
        pass

    @abstractmethod
    def apply_delta(
        self, account_id: int, amount: Decimal, updated_by: Optional[str] = None
    ) -> Account:
        """Add a signed amount to an account balance under a row lock."""
        pass

    # Sequences
    @abstractmethod
    def next_sequence_value(self, name: str) -> int:
        """Increment and return a named counter. Values are never reused."""
        pass

    # Journal entry operations
    @abstractmethod
    def create_journal_entry(
        self,
        journal_number: str,
        entry_date: date,
        narration: str,
        lines: list[JournalLine],
        reference: Optional[str] = None,
        status: EntryStatus = EntryStatus.DRAFT,
        created_by: Optional[str] = None,
        original_entry_id: Optional[int] = None,
    ) -> JournalEntry:
        """Create an entry with its lines; totals are derived from the lines."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int, for_update: bool = False) -> Optional[JournalEntry]:
        """Get entry by ID, optionally row-locking it."""
        pass

    @abstractmethod
    def get_journal_entry_by_number(self, journal_number: str) -> Optional[JournalEntry]:
        """Get entry by journal number."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        status: Optional[EntryStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        search: Optional[str] = None,
    ) -> list[JournalEntry]:
        """List entries ordered by date and journal number."""
        pass

    @abstractmethod
    def count_journal_entries(
        self,
        statuses: Optional[tuple[EntryStatus, ...]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        """Count entries matching the filters."""
        pass

    @abstractmethod
    def update_journal_entry(
        self,
        entry_id: int,
        entry_date: Optional[date] = None,
        narration: Optional[str] = None,
        reference: Optional[str] = None,
        lines: Optional[list[JournalLine]] = None,
        clear_reference: bool = False,
        updated_by: Optional[str] = None,
    ) -> JournalEntry:
        """Update header fields and optionally replace all lines."""
        pass

    @abstractmethod
    def delete_journal_entry(self, entry_id: int) -> None:
        """Delete an entry and its lines."""
        pass

    @abstractmethod
    def mark_entry_posted(
        self,
        entry_id: int,
        posted_by: Optional[str],
        posted_at: datetime,
        lines: list[JournalLine],
    ) -> JournalEntry:
        """Flip an entry to posted, storing refreshed line snapshots."""
        pass

    @abstractmethod
    def mark_entry_reversed(
        self, entry_id: int, reversal_entry_id: int, updated_by: Optional[str] = None
    ) -> JournalEntry:
        """Flip a posted entry to reversed and link its reversing entry."""
        pass

    @abstractmethod
    def list_posted_lines(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
    ) -> list[PostedLine]:
        """List lines of applied (posted or reversed) entries.

        Ordered by entry date, journal number and line position. Both date
        bounds are inclusive.
        """
        pass

"""Tests for the Database interface returning domain models."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from ledgerkit.database.base import JOURNAL_SEQUENCE
from ledgerkit.domain import entities
from ledgerkit.domain.entities import AccountSubType, AccountType, EntryStatus, JournalLine
from ledgerkit.domain.errors import AccountNotFoundError, DuplicateCodeError


def make_account(db, code, account_type=AccountType.ASSET, **kwargs):
    return db.create_account(
        code=code,
        name=f"Account {code}",
        account_type=account_type,
        sub_type=account_type.default_sub_type,
        **kwargs,
    )


def line(account, debit="0", credit="0"):
    return JournalLine(
        account_id=account.id,
        account_code=account.code,
        account_name=account.name,
        description=None,
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
    )


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_create_account_returns_domain_model(self, temp_db):
        """Test that create_account returns a domain Account entity."""
        account = make_account(temp_db, "1001", opening_balance=Decimal("12.34"))

        assert isinstance(account, entities.Account)
        assert account.sub_type == AccountSubType.CURRENT_ASSET
        assert account.balance == Decimal("12.34")
        assert isinstance(account.balance, Decimal)
        assert isinstance(account.created_at, datetime)

    def test_amounts_are_stored_exactly(self, temp_db):
        """Test that decimal amounts survive storage without float rounding."""
        account = make_account(temp_db, "1001", opening_balance=Decimal("0.1"))
        temp_db.apply_delta(account.id, Decimal("0.2"))

        assert temp_db.get_account(account.id).balance == Decimal("0.3")

    def test_duplicate_code(self, temp_db):
        """Test that a second account with the same code is rejected."""
        make_account(temp_db, "1001")

        with pytest.raises(DuplicateCodeError):
            make_account(temp_db, "1001")
        assert len(temp_db.list_accounts()) == 1

    def test_update_rejects_unknown_fields(self, temp_db):
        """Test that update_account only writes known columns."""
        account = make_account(temp_db, "1001")

        with pytest.raises(ValueError, match="balance"):
            temp_db.update_account(account.id, balance=Decimal("100"))

    def test_update_missing_account(self, temp_db):
        """Test that updating a missing account raises a domain error."""
        with pytest.raises(AccountNotFoundError):
            temp_db.update_account(999, name="Nope")

    def test_lock_accounts_skips_missing(self, temp_db):
        """Test that lock_accounts returns only accounts that exist."""
        first = make_account(temp_db, "1001")
        second = make_account(temp_db, "1002")

        with temp_db.transaction():
            locked = temp_db.lock_accounts([second.id, 999, first.id])

        assert sorted(locked) == [first.id, second.id]
        assert all(isinstance(acc, entities.Account) for acc in locked.values())

    def test_transaction_rolls_back(self, temp_db):
        """Test that an error inside transaction() undoes every write."""
        account = make_account(temp_db, "1001")

        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.apply_delta(account.id, Decimal("50"))
                make_account(temp_db, "1002")
                raise RuntimeError("abort")

        assert temp_db.get_account(account.id).balance == Decimal("0")
        assert temp_db.get_account_by_code("1002") is None

    def test_nested_transaction_joins_outer(self, temp_db):
        """Test that a nested transaction() commits with the outer one."""
        account = make_account(temp_db, "1001")

        with temp_db.transaction():
            with temp_db.transaction():
                temp_db.apply_delta(account.id, Decimal("5"))
            temp_db.apply_delta(account.id, Decimal("5"))

        assert temp_db.get_account(account.id).balance == Decimal("10")

    def test_sequence_values_increase(self, temp_db):
        """Test that the journal counter hands out increasing values."""
        values = [temp_db.next_sequence_value(JOURNAL_SEQUENCE) for _ in range(3)]

        assert values == [1, 2, 3]

    def test_sequence_counters_are_independent(self, temp_db):
        """Test that different counter names do not share values."""
        temp_db.next_sequence_value(JOURNAL_SEQUENCE)

        assert temp_db.next_sequence_value("other") == 1

    def test_journal_entry_round_trip(self, temp_db):
        """Test that journal entries come back as domain models with ordered lines."""
        cash = make_account(temp_db, "1001")
        capital = make_account(temp_db, "3001", AccountType.EQUITY)

        created = temp_db.create_journal_entry(
            journal_number="JE000001",
            entry_date=date(2024, 1, 15),
            narration="Investment",
            lines=[line(cash, debit="100"), line(capital, credit="100")],
            reference="REF-1",
        )
        entry = temp_db.get_journal_entry(created.id)

        assert isinstance(entry, entities.JournalEntry)
        assert entry.status == EntryStatus.DRAFT
        assert entry.reference == "REF-1"
        assert entry.total_debit == Decimal("100")
        assert entry.total_credit == Decimal("100")
        assert [l.account_code for l in entry.lines] == ["1001", "3001"]
        assert temp_db.get_journal_entry_by_number("JE000001").id == created.id

    def test_posted_lines_exclude_drafts(self, temp_db):
        """Test that list_posted_lines only returns applied history."""
        cash = make_account(temp_db, "1001")
        capital = make_account(temp_db, "3001", AccountType.EQUITY)
        draft = temp_db.create_journal_entry(
            journal_number="JE000001",
            entry_date=date(2024, 1, 1),
            narration="Draft",
            lines=[line(cash, debit="10"), line(capital, credit="10")],
        )

        assert temp_db.list_posted_lines() == []

        temp_db.mark_entry_posted(draft.id, "alice", datetime(2024, 1, 2), list(draft.lines))
        posted = temp_db.list_posted_lines()

        assert [(p.journal_number, p.account_id) for p in posted] == [
            ("JE000001", cash.id),
            ("JE000001", capital.id),
        ]
        assert temp_db.count_journal_entries(statuses=(EntryStatus.DRAFT,)) == 0

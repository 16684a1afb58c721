"""Tests for the journal entry lifecycle."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import cr, dr
from ledgerkit.config import LedgerConfig
from ledgerkit.domain.entities import EntryStatus, JournalLineInput
from ledgerkit.domain.errors import (
    EntryNotFoundError,
    InvalidLineError,
    NotDraftError,
    TooFewLinesError,
    UnbalancedEntryError,
    UnknownAccountError,
    ValidationError,
)
from ledgerkit.domain.journal import JournalService


def test_create_entry(journal_service, account_service, chart):
    entry = journal_service.create_entry(
        narration="Owner investment",
        entry_date=date(2024, 1, 15),
        lines=[dr(chart["1001"], "1000", "Deposit"), cr(chart["3001"], "1000")],
        reference="BANK-1",
        actor_id="alice",
    )

    assert entry.journal_number == "JE000001"
    assert entry.status == EntryStatus.DRAFT
    assert entry.entry_date == date(2024, 1, 15)
    assert entry.reference == "BANK-1"
    assert entry.created_by == "alice"
    assert entry.total_debit == Decimal("1000")
    assert entry.total_credit == Decimal("1000")
    assert [line.account_code for line in entry.lines] == ["1001", "3001"]
    assert entry.lines[0].account_name == "Cash"
    assert entry.lines[0].description == "Deposit"
    # Drafts do not move balances
    assert account_service.get_account(chart["1001"].id).balance == Decimal("0")


def test_journal_numbers_are_sequential(journal_service, chart):
    lines = [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    first = journal_service.create_entry("One", date(2024, 1, 1), lines)
    second = journal_service.create_entry("Two", date(2024, 1, 1), lines)

    assert first.journal_number == "JE000001"
    assert second.journal_number == "JE000002"


def test_journal_numbers_not_reused_after_delete(journal_service, chart):
    lines = [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    first = journal_service.create_entry("One", date(2024, 1, 1), lines)
    journal_service.delete_entry(first.id)

    second = journal_service.create_entry("Two", date(2024, 1, 1), lines)

    assert second.journal_number == "JE000002"


def test_journal_number_format_from_config(temp_db, chart):
    service = JournalService(temp_db, LedgerConfig(journal_prefix="GJ", journal_number_width=4))

    entry = service.create_entry(
        "Custom", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    assert entry.journal_number == "GJ0001"


def test_create_with_one_line(journal_service, chart):
    with pytest.raises(TooFewLinesError) as exc_info:
        journal_service.create_entry("One line", date(2024, 1, 1), [dr(chart["1001"], "10")])
    assert exc_info.value.kind == "TooFewLines"


@pytest.mark.parametrize(
    "debit,credit,message",
    [
        ("10", "10", "both"),
        ("-10", "0", "negative"),
        ("0", "0", "needs a debit or a credit"),
    ],
)
def test_create_with_invalid_line(journal_service, chart, debit, credit, message):
    bad = JournalLineInput(
        account_id=chart["1001"].id, debit_amount=Decimal(debit), credit_amount=Decimal(credit)
    )

    with pytest.raises(InvalidLineError, match=message):
        journal_service.create_entry("Bad", date(2024, 1, 1), [bad, cr(chart["3001"], "10")])


def test_create_rejects_float_amount(journal_service, chart):
    line = JournalLineInput(account_id=chart["1001"].id, debit_amount=0.1)

    with pytest.raises(InvalidLineError, match="float"):
        journal_service.create_entry("Float", date(2024, 1, 1), [line, cr(chart["3001"], "0.1")])


def test_create_with_unknown_account(journal_service, chart):
    lines = [JournalLineInput(account_id=999, debit_amount=Decimal("10")), cr(chart["3001"], "10")]

    with pytest.raises(UnknownAccountError, match="999"):
        journal_service.create_entry("Unknown", date(2024, 1, 1), lines)


def test_create_with_inactive_account(journal_service, account_service, chart):
    account_service.deactivate_account(chart["1002"].id)

    with pytest.raises(UnknownAccountError, match="inactive"):
        journal_service.create_entry(
            "Inactive", date(2024, 1, 1), [dr(chart["1002"], "10"), cr(chart["3001"], "10")]
        )


def test_create_unbalanced(journal_service, chart):
    with pytest.raises(UnbalancedEntryError) as exc_info:
        journal_service.create_entry(
            "Unbalanced", date(2024, 1, 1), [dr(chart["1001"], "500"), cr(chart["3001"], "400")]
        )
    assert exc_info.value.kind == "Unbalanced"
    assert journal_service.list_entries() == []


def test_create_within_tolerance(journal_service, chart):
    entry = journal_service.create_entry(
        "Rounding", date(2024, 1, 1), [dr(chart["1001"], "100"), cr(chart["3001"], "100.005")]
    )

    assert entry.total_credit == Decimal("100.005")


def test_validation_order(journal_service, chart):
    # Line count is checked before anything else
    with pytest.raises(TooFewLinesError):
        journal_service.create_entry(
            "Order", date(2024, 1, 1), [JournalLineInput(account_id=999, debit_amount=Decimal("5"))]
        )

    # Line shape is checked before account existence
    lines = [
        JournalLineInput(account_id=999, debit_amount=Decimal("5")),
        JournalLineInput(account_id=chart["3001"].id),
    ]
    with pytest.raises(InvalidLineError):
        journal_service.create_entry("Order", date(2024, 1, 1), lines)

    # Account existence is checked before balance
    lines = [JournalLineInput(account_id=999, debit_amount=Decimal("5")), cr(chart["3001"], "4")]
    with pytest.raises(UnknownAccountError):
        journal_service.create_entry("Order", date(2024, 1, 1), lines)


@pytest.mark.parametrize("narration", ["", "   ", "x" * 501])
def test_create_rejects_bad_narration(journal_service, chart, narration):
    with pytest.raises(ValidationError):
        journal_service.create_entry(
            narration, date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
        )


def test_create_normalizes_datetime(journal_service, chart):
    entry = journal_service.create_entry(
        "Datetime", datetime(2024, 3, 5, 14, 30), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    assert entry.entry_date == date(2024, 3, 5)


def test_update_draft(journal_service, chart):
    entry = journal_service.create_entry(
        "Original", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    updated = journal_service.update_entry(
        entry.id,
        narration="Changed",
        entry_date=date(2024, 2, 1),
        lines=[dr(chart["5001"], "75"), cr(chart["1001"], "50"), cr(chart["2001"], "25")],
        actor_id="bob",
    )

    assert updated.narration == "Changed"
    assert updated.entry_date == date(2024, 2, 1)
    assert updated.journal_number == entry.journal_number
    assert [line.account_code for line in updated.lines] == ["5001", "1001", "2001"]
    assert updated.total_debit == Decimal("75")
    assert updated.total_credit == Decimal("75")
    assert updated.updated_by == "bob"


def test_update_header_keeps_lines(journal_service, chart):
    entry = journal_service.create_entry(
        "Original", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    updated = journal_service.update_entry(entry.id, reference="INV-7")

    assert updated.reference == "INV-7"
    assert updated.lines == entry.lines


def test_update_clears_reference(journal_service, chart):
    entry = journal_service.create_entry(
        "Original",
        date(2024, 1, 1),
        [dr(chart["1001"], "10"), cr(chart["3001"], "10")],
        reference="INV-7",
    )

    unchanged = journal_service.update_entry(entry.id, reference="  ")
    assert unchanged.reference == "INV-7"

    cleared = journal_service.update_entry(entry.id, clear_reference=True)
    assert cleared.reference is None
    assert journal_service.get_entry(entry.id).reference is None


def test_update_rejects_reference_with_clear(journal_service, chart):
    entry = journal_service.create_entry(
        "Original", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    with pytest.raises(ValidationError, match="clear"):
        journal_service.update_entry(entry.id, reference="INV-8", clear_reference=True)


def test_update_with_unbalanced_lines(journal_service, chart):
    entry = journal_service.create_entry(
        "Original", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    with pytest.raises(UnbalancedEntryError):
        journal_service.update_entry(
            entry.id, lines=[dr(chart["1001"], "10"), cr(chart["3001"], "9")]
        )
    assert journal_service.get_entry(entry.id).lines == entry.lines


def test_update_posted_entry(journal_service, chart):
    entry = journal_service.create_entry(
        "Original", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )
    journal_service.post_entry(entry.id)

    with pytest.raises(NotDraftError):
        journal_service.update_entry(entry.id, narration="Too late")


def test_delete_posted_entry(journal_service, chart):
    entry = journal_service.create_entry(
        "Original", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )
    journal_service.post_entry(entry.id)

    with pytest.raises(NotDraftError) as exc_info:
        journal_service.delete_entry(entry.id)
    assert exc_info.value.kind == "NotDraft"


def test_delete_missing_entry(journal_service):
    with pytest.raises(EntryNotFoundError):
        journal_service.delete_entry(999)


def test_get_entry_by_number(journal_service, chart):
    entry = journal_service.create_entry(
        "Lookup", date(2024, 1, 1), [dr(chart["1001"], "10"), cr(chart["3001"], "10")]
    )

    assert journal_service.get_entry_by_number("je000001").id == entry.id
    assert journal_service.get_entry_by_number("JE999999") is None


def test_list_entries_filters(journal_service, chart):
    investment = journal_service.create_entry(
        "Owner investment", date(2024, 1, 10), [dr(chart["1001"], "1000"), cr(chart["3001"], "1000")]
    )
    rent = journal_service.create_entry(
        "January rent", date(2024, 1, 31), [dr(chart["5001"], "300"), cr(chart["1001"], "300")]
    )
    sale = journal_service.create_entry(
        "Invoice 7", date(2024, 2, 5), [dr(chart["1002"], "500"), cr(chart["4001"], "500")]
    )
    journal_service.post_entry(investment.id)

    assert [e.id for e in journal_service.list_entries()] == [investment.id, rent.id, sale.id]
    assert [e.id for e in journal_service.list_entries(status="posted")] == [investment.id]
    assert [e.id for e in journal_service.list_entries(status=EntryStatus.DRAFT)] == [rent.id, sale.id]
    assert [e.id for e in journal_service.list_entries(account_id=chart["1001"].id)] == [
        investment.id,
        rent.id,
    ]
    january = journal_service.list_entries(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31))
    assert [e.id for e in january] == [investment.id, rent.id]
    assert [e.id for e in journal_service.list_entries(search="rent")] == [rent.id]


def test_list_entries_rejects_unknown_status(journal_service):
    with pytest.raises(ValidationError):
        journal_service.list_entries(status="archived")


def test_list_entries_orders_numbers_past_their_width(temp_db, chart):
    service = JournalService(temp_db, LedgerConfig(journal_number_width=1))
    for i in range(11):
        service.create_entry(
            f"Deposit {i}", date(2024, 1, 1), [dr(chart["1001"], "1"), cr(chart["3001"], "1")]
        )

    numbers = [e.journal_number for e in service.list_entries()]

    assert numbers == [f"JE{n}" for n in range(1, 12)]

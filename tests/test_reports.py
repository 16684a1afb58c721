"""Tests for ledger reports."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import cr, dr
from ledgerkit.config import LedgerConfig
from ledgerkit.domain.entities import AccountType
from ledgerkit.domain.errors import (
    AccountNotFoundError,
    LedgerConsistencyError,
    ValidationError,
)
from ledgerkit.domain.journal import JournalService


def post(journal_service, narration, when, lines):
    entry = journal_service.create_entry(narration, when, lines)
    return journal_service.post_entry(entry.id)


@pytest.fixture
def activity(journal_service, chart):
    """Investment, a sale, rent and a later loan."""
    post(journal_service, "Investment", date(2024, 1, 1), [dr(chart["1001"], "1000"), cr(chart["3001"], "1000")])
    post(journal_service, "Sale", date(2024, 1, 10), [dr(chart["1001"], "300"), cr(chart["4001"], "300")])
    post(journal_service, "Rent", date(2024, 1, 20), [dr(chart["5001"], "200"), cr(chart["1001"], "200")])
    post(journal_service, "Loan", date(2024, 2, 5), [dr(chart["1002"], "500"), cr(chart["2001"], "500")])
    # Drafts never show up in reports
    journal_service.create_entry(
        "Pending", date(2024, 1, 15), [dr(chart["5001"], "999"), cr(chart["1001"], "999")]
    )
    return chart


def row_for(trial, code):
    return next(row for row in trial.rows if row.account_code == code)


def test_trial_balance(report_service, activity):
    trial = report_service.trial_balance(as_of=date(2024, 12, 31))

    assert [row.account_code for row in trial.rows] == ["1001", "1002", "2001", "3001", "4001", "5001"]
    assert row_for(trial, "1001").debit_balance == Decimal("1100")
    assert row_for(trial, "5001").debit_balance == Decimal("200")
    assert row_for(trial, "4001").credit_balance == Decimal("300")
    assert trial.total_debit == Decimal("1800")
    assert trial.total_credit == Decimal("1800")
    assert trial.is_balanced


def test_trial_balance_as_of(report_service, activity):
    trial = report_service.trial_balance(as_of=date(2024, 1, 15))

    assert [row.account_code for row in trial.rows] == ["1001", "3001", "4001"]
    assert trial.total_debit == Decimal("1300")
    assert trial.is_balanced


def test_trial_balance_type_filter(report_service, activity):
    trial = report_service.trial_balance(as_of=date(2024, 12, 31), account_type=AccountType.ASSET)

    assert [row.account_code for row in trial.rows] == ["1001", "1002"]
    assert trial.account_type == AccountType.ASSET


def test_trial_balance_include_zero(report_service, chart):
    trial = report_service.trial_balance(include_zero=True)

    assert len(trial.rows) == len(chart)
    assert trial.is_balanced


def test_trial_balance_flipped_sign(journal_service, report_service, chart):
    post(journal_service, "Overdraft", date(2024, 1, 1), [dr(chart["5001"], "50"), cr(chart["1001"], "50")])

    trial = report_service.trial_balance(as_of=date(2024, 1, 31))

    cash = row_for(trial, "1001")
    assert cash.debit_balance == Decimal("0")
    assert cash.credit_balance == Decimal("50")
    assert trial.is_balanced


def test_trial_balance_inactive_accounts(journal_service, account_service, report_service, chart):
    post(journal_service, "Receivable", date(2024, 1, 1), [dr(chart["1002"], "80"), cr(chart["4001"], "80")])
    account_service.deactivate_account(chart["1002"].id)
    account_service.deactivate_account(chart["2001"].id)

    trial = report_service.trial_balance(as_of=date(2024, 1, 31), include_zero=True)

    codes = [row.account_code for row in trial.rows]
    assert "1002" in codes
    assert "2001" not in codes
    assert trial.is_balanced


def test_trial_balance_with_opening_balances(account_service, report_service):
    account_service.create_account(code="1001", name="Cash", account_type="asset", opening_balance="500")
    account_service.create_account(code="3001", name="Capital", account_type="equity", opening_balance="500")

    trial = report_service.trial_balance()

    assert trial.total_debit == Decimal("500")
    assert trial.total_credit == Decimal("500")
    assert trial.is_balanced


def test_profit_and_loss(report_service, activity):
    pnl = report_service.profit_and_loss(date(2024, 1, 1), date(2024, 1, 31))

    assert [line.account_code for line in pnl.revenue] == ["4001"]
    assert [line.account_code for line in pnl.expenses] == ["5001"]
    assert pnl.total_revenue == Decimal("300")
    assert pnl.total_expenses == Decimal("200")
    assert pnl.net_income == Decimal("100")


def test_profit_and_loss_period_excludes_other_dates(report_service, activity):
    pnl = report_service.profit_and_loss(date(2024, 1, 15), date(2024, 1, 31))

    assert pnl.revenue == ()
    assert pnl.total_expenses == Decimal("200")
    assert pnl.net_income == Decimal("-200")


def test_profit_and_loss_rejects_reversed_range(report_service):
    with pytest.raises(ValidationError):
        report_service.profit_and_loss(date(2024, 2, 1), date(2024, 1, 1))


def test_balance_sheet_rolls_earnings_into_equity(report_service, activity):
    sheet = report_service.balance_sheet(as_of=date(2024, 12, 31))

    assert sheet.total_assets == Decimal("1600")
    assert sheet.total_liabilities == Decimal("500")
    assert sheet.current_earnings == Decimal("100")
    assert sheet.total_equity == Decimal("1100")
    assert [line.account_code for line in sheet.equity] == ["3001"]
    assert sheet.is_balanced


def test_balance_sheet_mid_period(report_service, activity):
    sheet = report_service.balance_sheet(as_of=date(2024, 1, 12))

    assert sheet.total_assets == Decimal("1300")
    assert sheet.current_earnings == Decimal("300")
    assert sheet.is_balanced


def test_ledger_running_balance(report_service, activity):
    ledger = report_service.ledger(activity["1001"].id)

    assert ledger.opening_balance == Decimal("0")
    assert [row.journal_number for row in ledger.rows] == ["JE000001", "JE000002", "JE000003"]
    assert [row.balance for row in ledger.rows] == [Decimal("1000"), Decimal("1300"), Decimal("1100")]
    assert ledger.closing_balance == Decimal("1100")


def test_ledger_orders_numbers_past_their_width(temp_db, report_service, chart):
    service = JournalService(temp_db, LedgerConfig(journal_number_width=1))
    for i in range(10):
        post(service, f"Deposit {i}", date(2024, 1, 1), [dr(chart["1001"], "1"), cr(chart["3001"], "1")])

    ledger = report_service.ledger(chart["1001"].id)

    assert [row.journal_number for row in ledger.rows] == [f"JE{n}" for n in range(1, 11)]
    assert [row.balance for row in ledger.rows] == [Decimal(n) for n in range(1, 11)]


def test_ledger_date_range(report_service, activity):
    ledger = report_service.ledger(
        activity["1001"].id, date_from=date(2024, 1, 5), date_to=date(2024, 1, 15)
    )

    assert ledger.opening_balance == Decimal("1000")
    assert [row.narration for row in ledger.rows] == ["Sale"]
    assert ledger.closing_balance == Decimal("1300")


def test_ledger_includes_opening_balance(account_service, journal_service, report_service):
    cash = account_service.create_account(code="1001", name="Cash", account_type="asset", opening_balance="50")
    capital = account_service.create_account(code="3001", name="Capital", account_type="equity")
    post(journal_service, "Top up", date(2024, 1, 1), [dr(cash, "25"), cr(capital, "25")])

    ledger = report_service.ledger(cash.id)

    assert ledger.opening_balance == Decimal("50")
    assert ledger.closing_balance == Decimal("75")


def test_ledger_missing_account(report_service):
    with pytest.raises(AccountNotFoundError):
        report_service.ledger(999)


def test_summary(report_service, activity):
    summary = report_service.summary(as_of=date(2024, 1, 31))

    assert summary.active_accounts == 6
    assert summary.draft_entries == 1
    assert summary.entries_this_month == 3
    assert summary.balances_by_type[AccountType.ASSET] == Decimal("1100")
    assert summary.net_worth == Decimal("1100")
    assert summary.net_income == Decimal("100")


def test_verify_balances(report_service, activity):
    assert report_service.verify_balances() == 6


def test_verify_balances_detects_drift(temp_db, report_service, activity):
    # Move a balance without any posted entry behind it
    temp_db.apply_delta(activity["1001"].id, Decimal("5"))

    with pytest.raises(LedgerConsistencyError) as exc_info:
        report_service.verify_balances()

    [drift] = exc_info.value.drifts
    assert drift.account_code == "1001"
    assert drift.difference == Decimal("5")

"""Ledger reporting domain service.

Reports replay posted history (entries that are posted or reversed) on top of
each account's opening balance. A reversed entry still counts: its effect is
cancelled by the posted reversing entry, so both belong to history.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ledgerkit.config import LedgerConfig
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    APPLIED_STATUSES,
    ZERO,
    Account,
    AccountLedger,
    AccountType,
    BalanceDrift,
    BalanceSheet,
    EntryStatus,
    LedgerRow,
    LedgerSummary,
    NormalSide,
    PostedLine,
    ProfitAndLoss,
    ReportLine,
    TrialBalance,
    TrialBalanceRow,
)
from ledgerkit.domain.errors import (
    AccountNotFoundError,
    LedgerConsistencyError,
    ValidationError,
    account_not_found,
)

logger = logging.getLogger(__name__)


def _report_line(account: Account, amount: Decimal) -> ReportLine:
    return ReportLine(
        account_id=account.id,
        account_code=account.code,
        account_name=account.name,
        sub_type=account.sub_type,
        amount=amount,
    )


def _check_range(date_from: Optional[date], date_to: Optional[date]) -> None:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise ValidationError(f"Start date {date_from} is after end date {date_to}")


class ReportService:
    """Service for building ledger reports."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize report service.

        Args:
            db: Database instance
            config: Ledger configuration (defaults apply if omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()

    def trial_balance(
        self,
        as_of: Optional[date] = None,
        account_type: Optional[AccountType] = None,
        include_zero: bool = False,
    ) -> TrialBalance:
        """Build a trial balance as of a date.

        Each account's net is shown on its normal side; if the net has flipped
        sign, its magnitude is shown in the opposite column. Inactive accounts
        appear only while they still carry a balance.

        Args:
            as_of: Include entries dated on or before this date (default: today)
            account_type: Only include accounts of this type
            include_zero: Also list active accounts with a zero balance

        Returns:
            TrialBalance with rows ordered by account code
        """
        as_of = as_of or date.today()
        with self.db.transaction():
            accounts = self.db.list_accounts(account_type=account_type)
            nets = self._net_balances(
                accounts,
                self.db.list_posted_lines(end_date=as_of),
                strict=account_type is None,
            )

        rows = []
        total_debit = ZERO
        total_credit = ZERO
        for account in accounts:
            net = nets[account.id]
            if net == ZERO and (not include_zero or not account.is_active):
                continue

            debit_balance = ZERO
            credit_balance = ZERO
            on_normal_side = net >= ZERO
            if (account.normal_side is NormalSide.DEBIT) == on_normal_side:
                debit_balance = abs(net)
            else:
                credit_balance = abs(net)

            rows.append(
                TrialBalanceRow(
                    account_id=account.id,
                    account_code=account.code,
                    account_name=account.name,
                    account_type=account.account_type,
                    debit_balance=debit_balance,
                    credit_balance=credit_balance,
                )
            )
            total_debit += debit_balance
            total_credit += credit_balance

        is_balanced = abs(total_debit - total_credit) < self.config.balance_tolerance
        if not is_balanced and account_type is None:
            logger.warning(
                "Trial balance as of %s does not balance: debit %s, credit %s",
                as_of,
                total_debit,
                total_credit,
            )
        return TrialBalance(
            as_of=as_of,
            rows=tuple(rows),
            total_debit=total_debit,
            total_credit=total_credit,
            is_balanced=is_balanced,
            account_type=account_type,
        )

    def profit_and_loss(self, date_from: date, date_to: date) -> ProfitAndLoss:
        """Build a profit and loss statement for a period.

        Income shows credit - debit and expenses show debit - credit for
        entries dated within the period. Opening balances are not activity
        and are left out.
        """
        _check_range(date_from, date_to)
        with self.db.transaction():
            accounts = self.db.list_accounts()
            lines = self.db.list_posted_lines(start_date=date_from, end_date=date_to)

        activity = self._net_balances(accounts, lines, include_opening=False, strict=True)
        revenue = [
            _report_line(acc, activity[acc.id])
            for acc in accounts
            if acc.account_type is AccountType.INCOME and activity[acc.id] != ZERO
        ]
        expenses = [
            _report_line(acc, activity[acc.id])
            for acc in accounts
            if acc.account_type is AccountType.EXPENSE and activity[acc.id] != ZERO
        ]
        total_revenue = sum((line.amount for line in revenue), ZERO)
        total_expenses = sum((line.amount for line in expenses), ZERO)

        return ProfitAndLoss(
            date_from=date_from,
            date_to=date_to,
            revenue=tuple(revenue),
            expenses=tuple(expenses),
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            net_income=total_revenue - total_expenses,
        )

    def balance_sheet(self, as_of: Optional[date] = None) -> BalanceSheet:
        """Build a balance sheet as of a date.

        Cumulative income less expenses through ``as_of`` is carried into
        equity as current earnings, so assets equal liabilities plus equity
        for any ledger built by posting.

        Args:
            as_of: Include entries dated on or before this date (default: today)

        Returns:
            BalanceSheet with sections ordered by account code
        """
        as_of = as_of or date.today()
        with self.db.transaction():
            accounts = self.db.list_accounts()
            nets = self._net_balances(
                accounts, self.db.list_posted_lines(end_date=as_of), strict=True
            )

        sections: dict[AccountType, list[ReportLine]] = {t: [] for t in AccountType}
        for account in accounts:
            if nets[account.id] != ZERO:
                sections[account.account_type].append(_report_line(account, nets[account.id]))

        def total(account_type: AccountType) -> Decimal:
            return sum((line.amount for line in sections[account_type]), ZERO)

        current_earnings = total(AccountType.INCOME) - total(AccountType.EXPENSE)
        total_assets = total(AccountType.ASSET)
        total_liabilities = total(AccountType.LIABILITY)
        total_equity = total(AccountType.EQUITY) + current_earnings
        difference = total_assets - (total_liabilities + total_equity)

        return BalanceSheet(
            as_of=as_of,
            assets=tuple(sections[AccountType.ASSET]),
            liabilities=tuple(sections[AccountType.LIABILITY]),
            equity=tuple(sections[AccountType.EQUITY]),
            current_earnings=current_earnings,
            total_assets=total_assets,
            total_liabilities=total_liabilities,
            total_equity=total_equity,
            is_balanced=abs(difference) < self.config.balance_tolerance,
        )

    def ledger(
        self,
        account_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AccountLedger:
        """List postings to one account with a running balance.

        The opening balance is the account's opening balance plus everything
        posted before ``date_from``.

        Raises:
            AccountNotFoundError: If the account does not exist
            ValidationError: If date_from is after date_to
        """
        _check_range(date_from, date_to)
        with self.db.transaction():
            account = self.db.get_account(account_id)
            if account is None:
                raise AccountNotFoundError(account_not_found(account_id))
            lines = self.db.list_posted_lines(end_date=date_to, account_id=account_id)

        side = account.normal_side
        opening_balance = account.opening_balance
        in_range = []
        for line in lines:
            if date_from is not None and line.entry_date < date_from:
                opening_balance += side.signed_amount(line.debit_amount, line.credit_amount)
            else:
                in_range.append(line)

        balance = opening_balance
        rows = []
        for line in in_range:
            balance += side.signed_amount(line.debit_amount, line.credit_amount)
            rows.append(
                LedgerRow(
                    entry_id=line.entry_id,
                    journal_number=line.journal_number,
                    entry_date=line.entry_date,
                    narration=line.narration,
                    description=line.description,
                    debit_amount=line.debit_amount,
                    credit_amount=line.credit_amount,
                    balance=balance,
                )
            )

        return AccountLedger(
            account=account,
            date_from=date_from,
            date_to=date_to,
            opening_balance=opening_balance,
            rows=tuple(rows),
            closing_balance=balance,
        )

    def summary(self, as_of: Optional[date] = None) -> LedgerSummary:
        """Headline figures: counts, balances by type, net worth and net income.

        Balances are cumulative through ``as_of`` for active accounts, and
        ``entries_this_month`` counts posted history from the first of the
        month of ``as_of``.
        """
        as_of = as_of or date.today()
        with self.db.transaction():
            accounts = self.db.list_accounts(include_inactive=False)
            lines = self.db.list_posted_lines(end_date=as_of)
            draft_entries = self.db.count_journal_entries(statuses=(EntryStatus.DRAFT,))
            entries_this_month = self.db.count_journal_entries(
                statuses=APPLIED_STATUSES,
                start_date=as_of.replace(day=1),
                end_date=as_of,
            )

        nets = self._net_balances(accounts, lines)
        by_type = {t: ZERO for t in AccountType}
        for account in accounts:
            by_type[account.account_type] += nets[account.id]

        return LedgerSummary(
            as_of=as_of,
            active_accounts=len(accounts),
            draft_entries=draft_entries,
            entries_this_month=entries_this_month,
            balances_by_type=by_type,
            net_worth=by_type[AccountType.ASSET] - by_type[AccountType.LIABILITY],
            net_income=by_type[AccountType.INCOME] - by_type[AccountType.EXPENSE],
        )

    def verify_balances(self) -> int:
        """Replay all posted history and compare it with stored balances.

        Returns:
            Number of accounts checked

        Raises:
            LedgerConsistencyError: If any stored balance differs from the replay
        """
        with self.db.transaction():
            accounts = self.db.list_accounts()
            expected = self._net_balances(accounts, self.db.list_posted_lines(), strict=True)

        drifts = tuple(
            BalanceDrift(
                account_id=acc.id,
                account_code=acc.code,
                stored_balance=acc.balance,
                expected_balance=expected[acc.id],
            )
            for acc in accounts
            if acc.balance != expected[acc.id]
        )
        if drifts:
            details = ", ".join(
                f"{d.account_code} stored {d.stored_balance} expected {d.expected_balance}"
                for d in drifts
            )
            logger.error("Ledger balances drifted from posted history: %s", details)
            raise LedgerConsistencyError(f"Stored balances do not match posted history: {details}", drifts)
        return len(accounts)

    @staticmethod
    def _net_balances(
        accounts: Iterable[Account],
        lines: Iterable[PostedLine],
        include_opening: bool = True,
        strict: bool = False,
    ) -> dict[int, Decimal]:
        """Net posted lines onto each account's normal side.

        Lines on accounts outside ``accounts`` are skipped, unless ``strict``
        says the list is the whole registry.

        Raises:
            LedgerConsistencyError: In strict mode, if a posted line names an
                account that does not exist
        """
        by_id = {acc.id: acc for acc in accounts}
        nets = {
            acc_id: (acc.opening_balance if include_opening else ZERO)
            for acc_id, acc in by_id.items()
        }
        for line in lines:
            account = by_id.get(line.account_id)
            if account is None:
                if strict:
                    raise LedgerConsistencyError(
                        f"Posted entry {line.journal_number} references missing account {line.account_id}"
                    )
                continue
            nets[account.id] += account.normal_side.signed_amount(
                line.debit_amount, line.credit_amount
            )
        return nets

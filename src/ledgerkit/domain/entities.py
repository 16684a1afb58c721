"""Domain model entities for ledgerkit.

These are pure data classes representing bookkeeping concepts, independent of
database schema. Monetary values are always ``Decimal``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

ZERO = Decimal("0")


class NormalSide(Enum):
    """Side on which an account type's balance ordinarily increases."""

    DEBIT = "debit"
    CREDIT = "credit"

    def signed_amount(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Net a debit/credit pair onto this side."""
        if self is NormalSide.DEBIT:
            return debit - credit
        return credit - debit


class AccountType(Enum):
    """Top-level account classification."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def normal_side(self) -> NormalSide:
        return _NORMAL_SIDES[self]

    @property
    def default_sub_type(self) -> "AccountSubType":
        return _DEFAULT_SUB_TYPES[self]


class AccountSubType(Enum):
    """Refinement of an account type."""

    CURRENT_ASSET = "current_asset"
    FIXED_ASSET = "fixed_asset"
    OTHER_ASSET = "other_asset"
    CURRENT_LIABILITY = "current_liability"
    LONG_TERM_LIABILITY = "long_term_liability"
    OTHER_LIABILITY = "other_liability"
    OWNER_EQUITY = "owner_equity"
    RETAINED_EARNINGS = "retained_earnings"
    REVENUE = "revenue"
    OTHER_INCOME = "other_income"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"
    OPERATING_EXPENSE = "operating_expense"
    OTHER_EXPENSE = "other_expense"

    @property
    def account_type(self) -> AccountType:
        return _SUB_TYPE_PARENTS[self]


_NORMAL_SIDES = {
    AccountType.ASSET: NormalSide.DEBIT,
    AccountType.EXPENSE: NormalSide.DEBIT,
    AccountType.LIABILITY: NormalSide.CREDIT,
    AccountType.EQUITY: NormalSide.CREDIT,
    AccountType.INCOME: NormalSide.CREDIT,
}

_SUB_TYPE_PARENTS = {
    AccountSubType.CURRENT_ASSET: AccountType.ASSET,
    AccountSubType.FIXED_ASSET: AccountType.ASSET,
    AccountSubType.OTHER_ASSET: AccountType.ASSET,
    AccountSubType.CURRENT_LIABILITY: AccountType.LIABILITY,
    AccountSubType.LONG_TERM_LIABILITY: AccountType.LIABILITY,
    AccountSubType.OTHER_LIABILITY: AccountType.LIABILITY,
    AccountSubType.OWNER_EQUITY: AccountType.EQUITY,
    AccountSubType.RETAINED_EARNINGS: AccountType.EQUITY,
    AccountSubType.REVENUE: AccountType.INCOME,
    AccountSubType.OTHER_INCOME: AccountType.INCOME,
    AccountSubType.COST_OF_GOODS_SOLD: AccountType.EXPENSE,
    AccountSubType.OPERATING_EXPENSE: AccountType.EXPENSE,
    AccountSubType.OTHER_EXPENSE: AccountType.EXPENSE,
}

_DEFAULT_SUB_TYPES = {
    AccountType.ASSET: AccountSubType.CURRENT_ASSET,
    AccountType.LIABILITY: AccountSubType.CURRENT_LIABILITY,
    AccountType.EQUITY: AccountSubType.OWNER_EQUITY,
    AccountType.INCOME: AccountSubType.REVENUE,
    AccountType.EXPENSE: AccountSubType.OPERATING_EXPENSE,
}


class EntryStatus(Enum):
    """Journal entry lifecycle state."""

    DRAFT = "draft"
    POSTED = "posted"
    REVERSED = "reversed"


# Statuses whose lines have been applied to account balances
APPLIED_STATUSES = (EntryStatus.POSTED, EntryStatus.REVERSED)


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry."""

    id: int
    code: str
    name: str
    account_type: AccountType
    sub_type: AccountSubType
    parent_id: Optional[int]
    level: int
    is_active: bool
    balance: Decimal
    opening_balance: Decimal
    currency: str
    description: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None

    @property
    def normal_side(self) -> NormalSide:
        return self.account_type.normal_side

    @property
    def full_name(self) -> str:
        return f"{self.code} - {self.name}"


@dataclass(frozen=True)
class JournalLineInput:
    """Caller-supplied line for creating or editing a draft entry."""

    account_id: int
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalLine:
    """Stored journal line with account snapshot."""

    account_id: int
    account_code: str
    account_name: str
    description: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal


@dataclass(frozen=True)
class JournalEntry:
    """Journal entry with its ordered lines."""

    id: int
    journal_number: str
    entry_date: date
    narration: str
    reference: Optional[str]
    status: EntryStatus
    lines: tuple[JournalLine, ...]
    total_debit: Decimal
    total_credit: Decimal
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    posted_at: Optional[datetime] = None
    posted_by: Optional[str] = None
    reversal_entry_id: Optional[int] = None
    original_entry_id: Optional[int] = None

    def is_balanced(self, tolerance: Decimal) -> bool:
        return abs(self.total_debit - self.total_credit) < tolerance


@dataclass(frozen=True)
class AccountTreeNode:
    """Account with nested children for hierarchy display."""

    account: Account
    children: tuple["AccountTreeNode", ...] = ()


@dataclass(frozen=True)
class PostedLine:
    """A line of posted history, flattened with its entry header."""

    entry_id: int
    journal_number: str
    entry_date: date
    narration: str
    account_id: int
    description: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal


@dataclass(frozen=True)
class TrialBalanceRow:
    account_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    debit_balance: Decimal
    credit_balance: Decimal


@dataclass(frozen=True)
class TrialBalance:
    """Trial balance as of a date."""

    as_of: date
    rows: tuple[TrialBalanceRow, ...]
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool
    account_type: Optional[AccountType] = None


@dataclass(frozen=True)
class ReportLine:
    """One account's amount within a financial statement section."""

    account_id: int
    account_code: str
    account_name: str
    sub_type: AccountSubType
    amount: Decimal


@dataclass(frozen=True)
class ProfitAndLoss:
    date_from: date
    date_to: date
    revenue: tuple[ReportLine, ...]
    expenses: tuple[ReportLine, ...]
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal


@dataclass(frozen=True)
class BalanceSheet:
    """Balance sheet with period earnings rolled into equity."""

    as_of: date
    assets: tuple[ReportLine, ...]
    liabilities: tuple[ReportLine, ...]
    equity: tuple[ReportLine, ...]
    current_earnings: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    is_balanced: bool


@dataclass(frozen=True)
class LedgerRow:
    entry_id: int
    journal_number: str
    entry_date: date
    narration: str
    description: Optional[str]
    debit_amount: Decimal
    credit_amount: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AccountLedger:
    """Chronological postings for one account with a running balance."""

    account: Account
    date_from: Optional[date]
    date_to: Optional[date]
    opening_balance: Decimal
    rows: tuple[LedgerRow, ...]
    closing_balance: Decimal


@dataclass(frozen=True)
class LedgerSummary:
    """Headline figures for the whole ledger."""

    as_of: date
    active_accounts: int
    draft_entries: int
    entries_this_month: int
    balances_by_type: dict[AccountType, Decimal] = field(default_factory=dict)
    net_worth: Decimal = ZERO
    net_income: Decimal = ZERO


@dataclass(frozen=True)
class BalanceDrift:
    """Difference between a stored balance and replayed history."""

    account_id: int
    account_code: str
    stored_balance: Decimal
    expected_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored_balance - self.expected_balance


class Role(Enum):
    """Actor role supplied by the caller's identity provider."""

    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    MANAGER = "manager"
    AUDITOR = "auditor"

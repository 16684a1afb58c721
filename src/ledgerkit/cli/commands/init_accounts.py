"""Initialize the default chart of accounts."""

import click

from ledgerkit.cli.error_handling import require_write_access
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.errors import DomainError


# (code, name, type, sub type, parent code)
INITIAL_ACCOUNTS = [
    # Assets
    ("1000", "Current Assets", "asset", "current_asset", None),
    ("1100", "Cash and Cash Equivalents", "asset", "current_asset", "1000"),
    ("1110", "Cash in Bank", "asset", "current_asset", "1000"),
    ("1120", "Petty Cash", "asset", "current_asset", "1000"),
    ("1200", "Accounts Receivable", "asset", "current_asset", "1000"),
    ("1300", "Inventory", "asset", "current_asset", "1000"),
    ("1400", "Prepaid Expenses", "asset", "current_asset", "1000"),
    ("1500", "Non-Current Assets", "asset", "fixed_asset", None),
    ("1510", "Property, Plant & Equipment", "asset", "fixed_asset", "1500"),
    ("1520", "Accumulated Depreciation", "asset", "fixed_asset", "1500"),
    ("1530", "Intangible Assets", "asset", "other_asset", "1500"),
    # Liabilities
    ("2000", "Current Liabilities", "liability", "current_liability", None),
    ("2100", "Accounts Payable", "liability", "current_liability", "2000"),
    ("2200", "Short-term Loans", "liability", "current_liability", "2000"),
    ("2300", "Accrued Expenses", "liability", "current_liability", "2000"),
    ("2400", "Taxes Payable", "liability", "current_liability", "2000"),
    ("2500", "Non-Current Liabilities", "liability", "long_term_liability", None),
    ("2510", "Long-term Loans", "liability", "long_term_liability", "2500"),
    ("2520", "Mortgage Payable", "liability", "long_term_liability", "2500"),
    # Equity
    ("3000", "Owner's Equity", "equity", "owner_equity", None),
    ("3100", "Share Capital", "equity", "owner_equity", "3000"),
    ("3200", "Retained Earnings", "equity", "retained_earnings", "3000"),
    ("3300", "Current Year Earnings", "equity", "retained_earnings", "3000"),
    # Income
    ("4000", "Operating Revenue", "income", "revenue", None),
    ("4100", "Sales Revenue", "income", "revenue", "4000"),
    ("4200", "Service Revenue", "income", "revenue", "4000"),
    ("4300", "Other Income", "income", "other_income", "4000"),
    # Expenses
    ("5000", "Operating Expenses", "expense", "operating_expense", None),
    ("5100", "Cost of Goods Sold", "expense", "cost_of_goods_sold", "5000"),
    ("5200", "Salaries and Wages", "expense", "operating_expense", "5000"),
    ("5300", "Rent Expense", "expense", "operating_expense", "5000"),
    ("5400", "Utilities Expense", "expense", "operating_expense", "5000"),
    ("5500", "Office Supplies", "expense", "operating_expense", "5000"),
    ("5600", "Marketing Expenses", "expense", "operating_expense", "5000"),
    ("5700", "Travel Expenses", "expense", "operating_expense", "5000"),
    ("5800", "Depreciation Expense", "expense", "operating_expense", "5000"),
    ("5900", "Interest Expense", "expense", "other_expense", "5000"),
]


@click.command("init-accounts")
@click.option("--force", is_flag=True, help="Add missing default accounts even if accounts exist")
@click.pass_context
def init_accounts(ctx, force: bool):
    """Initialize database with the default chart of accounts."""
    require_write_access(ctx, "create accounts")
    service = AccountService(ctx.obj["db"], ctx.obj["config"])

    if service.list_accounts() and not force:
        click.echo("Accounts already exist. Use --force to add missing defaults.")
        return

    click.echo("Creating default chart of accounts...")

    # Parents come before their children in INITIAL_ACCOUNTS
    created = 0
    skipped = 0
    errors = 0
    for code, name, account_type, sub_type, parent_code in INITIAL_ACCOUNTS:
        if service.get_account_by_code(code) is not None:
            skipped += 1
            continue
        parent = service.get_account_by_code(parent_code) if parent_code else None
        if parent_code and parent is None:
            click.echo(f"Warning: Could not create account '{code}': parent '{parent_code}' missing", err=True)
            errors += 1
            continue
        try:
            service.create_account(
                code=code,
                name=name,
                account_type=account_type,
                sub_type=sub_type,
                parent_id=parent.id if parent else None,
                description=f"Default {account_type} account",
                actor_id=ctx.obj["actor"],
            )
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create account '{code}': {e}", err=True)
            errors += 1

    message = f"Created {created} accounts"
    if skipped:
        message += f", skipped {skipped} existing"
    if errors:
        message += f" with {errors} errors"
    click.echo(message + ".")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)

"""Reporting commands."""

import click

from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.date_filters import parse_date_option, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.cli.formatting import echo_rule, format_amount, format_optional_amount
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import AccountType, ReportLine
from ledgerkit.domain.errors import DomainError, LedgerConsistencyError
from ledgerkit.domain.reports import ReportService
from ledgerkit.utils.date_parser import PERIODS, get_date_range


def _service(ctx) -> ReportService:
    return ReportService(ctx.obj["db"], ctx.obj["config"])


def _echo_section(title: str, lines: tuple[ReportLine, ...], total_label: str, total) -> None:
    click.echo(f"\n{title}")
    for line in lines:
        label = f"  {line.account_code} {line.account_name}"
        click.echo(f"{label[:58]:58s} {format_amount(line.amount):>18s}")
    click.echo(f"{total_label:58s} {format_amount(total):>18s}")


@click.group()
def report_group():
    """Trial balance, financial statements and ledgers."""
    pass


@report_group.command("trial-balance")
@click.option("--as-of", help="Include entries dated on or before this date (default: today)")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType], case_sensitive=False),
    help="Only accounts of this type",
)
@click.option("--include-zero", is_flag=True, help="Also list accounts with a zero balance")
@click.pass_context
def trial_balance(ctx, as_of: str | None, account_type: str | None, include_zero: bool):
    """Show every account's balance in debit and credit columns."""
    report = _service(ctx).trial_balance(
        as_of=parse_date_option(ctx, as_of, "as-of date"),
        account_type=AccountType(account_type.lower()) if account_type else None,
        include_zero=include_zero,
    )

    click.echo(f"\nTrial balance as of {report.as_of}")
    echo_rule("=")
    click.echo(f"{'Account':40s} {'Debit':>18s} {'Credit':>18s}")
    echo_rule()
    for row in report.rows:
        label = f"{row.account_code} {row.account_name}"
        click.echo(
            f"{label[:40]:40s} {format_optional_amount(row.debit_balance):>18s} "
            f"{format_optional_amount(row.credit_balance):>18s}"
        )
    echo_rule()
    click.echo(
        f"{'Total':40s} {format_amount(report.total_debit):>18s} {format_amount(report.total_credit):>18s}"
    )
    click.echo("Balanced" if report.is_balanced else "NOT BALANCED")


@report_group.command("profit-loss")
@click.option("--from", "start_date", help="First day of the period")
@click.option("--to", "end_date", help="Last day of the period")
@click.option("--period", type=click.Choice(PERIODS), help="Predefined period (default: this-year)")
@click.pass_context
def profit_loss(ctx, start_date: str | None, end_date: str | None, period: str | None):
    """Show revenue, expenses and net income for a period."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period=period,
        default_range=get_date_range("this-year"),
    )
    if start is None or end is None:
        click.echo("Error: Both --from and --to are required when one is given.", err=True)
        ctx.exit(1)

    try:
        report = _service(ctx).profit_and_loss(start, end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nProfit and loss {report.date_from} to {report.date_to}")
    echo_rule("=")
    _echo_section("Revenue", report.revenue, "Total revenue", report.total_revenue)
    _echo_section("Expenses", report.expenses, "Total expenses", report.total_expenses)
    echo_rule()
    click.echo(f"{'Net income':58s} {format_amount(report.net_income):>18s}")


@report_group.command("balance-sheet")
@click.option("--as-of", help="Balance sheet date (default: today)")
@click.pass_context
def balance_sheet(ctx, as_of: str | None):
    """Show assets, liabilities and equity as of a date."""
    report = _service(ctx).balance_sheet(as_of=parse_date_option(ctx, as_of, "as-of date"))

    click.echo(f"\nBalance sheet as of {report.as_of}")
    echo_rule("=")
    _echo_section("Assets", report.assets, "Total assets", report.total_assets)
    _echo_section("Liabilities", report.liabilities, "Total liabilities", report.total_liabilities)
    _echo_section(
        "Equity",
        report.equity,
        "  Equity accounts",
        report.total_equity - report.current_earnings,
    )
    click.echo(f"{'  Current earnings':58s} {format_amount(report.current_earnings):>18s}")
    click.echo(f"{'Total equity':58s} {format_amount(report.total_equity):>18s}")
    echo_rule()
    click.echo(
        f"{'Total liabilities and equity':58s} "
        f"{format_amount(report.total_liabilities + report.total_equity):>18s}"
    )
    click.echo("Balanced" if report.is_balanced else "NOT BALANCED")


@report_group.command("ledger")
@click.argument("account", metavar="ACCOUNT")
@click.option("--from", "start_date", help="First day to list")
@click.option("--to", "end_date", help="Last day to list")
@click.option("--period", type=click.Choice(PERIODS), help="Predefined date range")
@click.pass_context
def account_ledger(
    ctx, account: str, start_date: str | None, end_date: str | None, period: str | None
):
    """Show postings to one account with a running balance.

    ACCOUNT can be an account code or ID.
    """
    accounts = AccountService(ctx.obj["db"], ctx.obj["config"])
    account_id = resolve_account_or_exit(ctx, accounts, account)
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    try:
        ledger = _service(ctx).ledger(account_id, date_from=start, date_to=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nLedger for {ledger.account.full_name}")
    echo_rule("=")
    click.echo(f"{'Opening balance':60s} {format_amount(ledger.opening_balance):>17s}")
    echo_rule()
    for row in ledger.rows:
        text = row.description or row.narration
        click.echo(
            f"{row.entry_date} {row.journal_number:9s} {text[:20]:20s} "
            f"{format_optional_amount(row.debit_amount):>12s} "
            f"{format_optional_amount(row.credit_amount):>12s} {format_amount(row.balance):>17s}"
        )
    echo_rule()
    click.echo(f"{'Closing balance':60s} {format_amount(ledger.closing_balance):>17s}")


@report_group.command("summary")
@click.option("--as-of", help="Summary date (default: today)")
@click.pass_context
def summary(ctx, as_of: str | None):
    """Show headline ledger figures."""
    report = _service(ctx).summary(as_of=parse_date_option(ctx, as_of, "as-of date"))

    click.echo(f"\nLedger summary as of {report.as_of}")
    echo_rule("=")
    click.echo(f"Active accounts:          {report.active_accounts}")
    click.echo(f"Draft entries:            {report.draft_entries}")
    click.echo(f"Entries posted this month: {report.entries_this_month}")
    echo_rule()
    for account_type, total in report.balances_by_type.items():
        click.echo(f"{account_type.value.capitalize():25s} {format_amount(total):>18s}")
    echo_rule()
    click.echo(f"{'Net worth':25s} {format_amount(report.net_worth):>18s}")
    click.echo(f"{'Net income':25s} {format_amount(report.net_income):>18s}")


@report_group.command("verify")
@click.pass_context
def verify(ctx):
    """Check stored balances against posted history."""
    try:
        checked = _service(ctx).verify_balances()
    except LedgerConsistencyError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(2)
    click.echo(f"Ledger is consistent ({checked} accounts checked).")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")

"""Text rendering shared by CLI commands."""

from decimal import Decimal

import click

from ledgerkit.domain.entities import JournalEntry

RULE_WIDTH = 78


def format_amount(amount: Decimal) -> str:
    """Render an amount with thousands separators and two decimals."""
    return f"{amount:,.2f}"


def format_optional_amount(amount: Decimal) -> str:
    """Render an amount, or blank for zero (debit/credit columns)."""
    return format_amount(amount) if amount else ""


def echo_rule(char: str = "-") -> None:
    click.echo(char * RULE_WIDTH)


def echo_entry(entry: JournalEntry) -> None:
    """Print an entry header and its lines."""
    click.echo(f"\n{entry.journal_number}  {entry.entry_date}  [{entry.status.value}]")
    click.echo(f"  {entry.narration}")
    if entry.reference:
        click.echo(f"  Reference: {entry.reference}")
    if entry.posted_at:
        click.echo(f"  Posted: {entry.posted_at:%Y-%m-%d %H:%M} by {entry.posted_by or '-'}")
    if entry.original_entry_id:
        click.echo(f"  Reverses entry ID {entry.original_entry_id}")
    if entry.reversal_entry_id:
        click.echo(f"  Reversed by entry ID {entry.reversal_entry_id}")
    echo_rule()
    click.echo(f"{'Account':36s} {'Debit':>18s} {'Credit':>18s}")
    echo_rule()
    for line in entry.lines:
        label = f"{line.account_code} {line.account_name}"
        click.echo(
            f"{label[:36]:36s} "
            f"{format_optional_amount(line.debit_amount):>18s} "
            f"{format_optional_amount(line.credit_amount):>18s}"
        )
        if line.description:
            click.echo(f"    {line.description}")
    echo_rule()
    click.echo(
        f"{'Total':36s} {format_amount(entry.total_debit):>18s} {format_amount(entry.total_credit):>18s}"
    )

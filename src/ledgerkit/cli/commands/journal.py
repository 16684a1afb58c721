"""Journal entry commands."""

from datetime import date

import click

from ledgerkit.cli.account_resolution import resolve_account_or_exit, resolve_entry_or_exit
from ledgerkit.cli.date_filters import parse_date_option, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error, require_write_access
from ledgerkit.cli.formatting import echo_entry, echo_rule, format_amount
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import EntryStatus, JournalLineInput
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.date_parser import PERIODS
from ledgerkit.utils.line_parser import parse_line

LINE_HELP = 'Line as "ACCOUNT dr|cr AMOUNT [DESCRIPTION]" (repeat for each line)'


def _service(ctx) -> JournalService:
    return JournalService(ctx.obj["db"], ctx.obj["config"])


def _parse_lines(ctx, raw_lines: tuple[str, ...]) -> list[JournalLineInput]:
    """Turn --line options into line inputs, resolving account codes."""
    accounts = AccountService(ctx.obj["db"], ctx.obj["config"])
    lines = []
    for raw in raw_lines:
        try:
            parsed = parse_line(raw)
        except ValueError as e:
            handle_domain_error(ctx, e)
        lines.append(
            JournalLineInput(
                account_id=resolve_account_or_exit(ctx, accounts, parsed.account),
                debit_amount=parsed.debit_amount,
                credit_amount=parsed.credit_amount,
                description=parsed.description,
            )
        )
    return lines


@click.group()
def journal_group():
    """Record, post and reverse journal entries."""
    pass


@journal_group.command("create")
@click.option("--narration", "-n", required=True, help="What the entry records")
@click.option("--date", "entry_date", help="Entry date (default: today)")
@click.option("--reference", help="External reference, e.g. an invoice number")
@click.option("--line", "lines", multiple=True, required=True, help=LINE_HELP)
@click.option("--post", "post_now", is_flag=True, help="Post the entry right away")
@click.pass_context
def create_entry(
    ctx,
    narration: str,
    entry_date: str | None,
    reference: str | None,
    lines: tuple[str, ...],
    post_now: bool,
):
    """Create a draft journal entry.

    Examples:
        ledgerkit journal create -n "Owner investment" --line "1110 dr 1000" --line "3100 cr 1000"
        ledgerkit journal create -n "Office rent" --date 2024-03-01 \\
            --line "5300 dr 1200 March rent" --line "1110 cr 1200" --post
    """
    require_write_access(ctx, "create journal entries")
    service = _service(ctx)
    when = parse_date_option(ctx, entry_date, "date") or date.today()
    line_inputs = _parse_lines(ctx, lines)

    try:
        entry = service.create_entry(
            narration=narration,
            entry_date=when,
            lines=line_inputs,
            reference=reference,
            actor_id=ctx.obj["actor"],
        )
        click.echo(f"Created draft {entry.journal_number} (ID: {entry.id})")
        if post_now:
            entry = service.post_entry(entry.id, actor_id=ctx.obj["actor"])
            click.echo(f"Posted {entry.journal_number}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@journal_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in EntryStatus], case_sensitive=False),
    help="Only entries in this status",
)
@click.option("--from", "start_date", help="Earliest entry date")
@click.option("--to", "end_date", help="Latest entry date")
@click.option("--period", type=click.Choice(PERIODS), help="Predefined date range")
@click.option("--account", help="Only entries touching this account (code or ID)")
@click.option("--search", help="Match journal number, narration or reference")
@click.pass_context
def list_entries(
    ctx,
    status: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    account: str | None,
    search: str | None,
):
    """List journal entries by date."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )
    account_id = None
    if account:
        accounts = AccountService(ctx.obj["db"], ctx.obj["config"])
        account_id = resolve_account_or_exit(ctx, accounts, account)

    entries = _service(ctx).list_entries(
        status=status, start_date=start, end_date=end, account_id=account_id, search=search
    )
    if not entries:
        click.echo("No journal entries found.")
        return

    click.echo("\nJournal entries:")
    echo_rule()
    for entry in entries:
        click.echo(
            f"{entry.journal_number:10s} | {entry.entry_date} | {entry.status.value:8s} | "
            f"{entry.narration[:30]:30s} | {format_amount(entry.total_debit):>12s}"
        )


@journal_group.command("show")
@click.argument("entry", metavar="ENTRY")
@click.pass_context
def show_entry(ctx, entry: str):
    """Show an entry with its lines.

    ENTRY can be a journal number (JE000001) or entry ID.
    """
    service = _service(ctx)
    echo_entry(service.require_entry(resolve_entry_or_exit(ctx, service, entry)))


@journal_group.command("update")
@click.argument("entry", metavar="ENTRY")
@click.option("--narration", "-n", help="New narration")
@click.option("--date", "entry_date", help="New entry date")
@click.option("--reference", help="New reference")
@click.option("--no-reference", is_flag=True, help="Remove the reference")
@click.option("--line", "lines", multiple=True, help=LINE_HELP + "; replaces all lines")
@click.pass_context
def update_entry(
    ctx,
    entry: str,
    narration: str | None,
    entry_date: str | None,
    reference: str | None,
    no_reference: bool,
    lines: tuple[str, ...],
):
    """Edit a draft entry."""
    require_write_access(ctx, "update journal entries")
    service = _service(ctx)
    entry_id = resolve_entry_or_exit(ctx, service, entry)
    when = parse_date_option(ctx, entry_date, "date")
    line_inputs = _parse_lines(ctx, lines) if lines else None

    try:
        updated = service.update_entry(
            entry_id,
            narration=narration,
            entry_date=when,
            reference=reference,
            clear_reference=no_reference,
            lines=line_inputs,
            actor_id=ctx.obj["actor"],
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated draft {updated.journal_number}")


@journal_group.command("delete")
@click.argument("entry", metavar="ENTRY")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_entry(ctx, entry: str, yes: bool):
    """Delete a draft entry."""
    require_write_access(ctx, "delete journal entries")
    service = _service(ctx)
    existing = service.require_entry(resolve_entry_or_exit(ctx, service, entry))

    if not yes and not click.confirm(f"Are you sure you want to delete {existing.journal_number}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_entry(existing.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted draft {existing.journal_number}")


@journal_group.command("post")
@click.argument("entry", metavar="ENTRY")
@click.pass_context
def post_entry(ctx, entry: str):
    """Post a draft entry to account balances."""
    require_write_access(ctx, "post journal entries")
    service = _service(ctx)
    entry_id = resolve_entry_or_exit(ctx, service, entry)
    try:
        posted = service.post_entry(entry_id, actor_id=ctx.obj["actor"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Posted {posted.journal_number} ({format_amount(posted.total_debit)})")


@journal_group.command("reverse")
@click.argument("entry", metavar="ENTRY")
@click.option("--narration", "-n", help="Narration for the reversing entry")
@click.option("--date", "reversal_date", help="Date of the reversing entry (default: original date)")
@click.pass_context
def reverse_entry(ctx, entry: str, narration: str | None, reversal_date: str | None):
    """Reverse a posted entry with a mirrored entry."""
    require_write_access(ctx, "reverse journal entries")
    service = _service(ctx)
    entry_id = resolve_entry_or_exit(ctx, service, entry)
    when = parse_date_option(ctx, reversal_date, "date")
    try:
        reversal = service.reverse_entry(
            entry_id, actor_id=ctx.obj["actor"], narration=narration, reversal_date=when
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reversed with {reversal.journal_number} (ID: {reversal.id})")


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")

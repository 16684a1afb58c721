"""Account management commands."""

import click

from ledgerkit.cli.account_resolution import resolve_account_or_exit
from ledgerkit.cli.error_handling import handle_domain_error, require_write_access
from ledgerkit.cli.formatting import echo_rule, format_amount
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import AccountSubType, AccountTreeNode, AccountType
from ledgerkit.domain.errors import DomainError
from ledgerkit.utils.amount_parser import parse_amount

ACCOUNT_TYPES = click.Choice([t.value for t in AccountType], case_sensitive=False)
SUB_TYPES = click.Choice([s.value for s in AccountSubType], case_sensitive=False)


def _service(ctx) -> AccountService:
    return AccountService(ctx.obj["db"], ctx.obj["config"])


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code", metavar="CODE")
@click.argument("name", metavar="NAME")
@click.option("--type", "account_type", type=ACCOUNT_TYPES, required=True, help="Account type")
@click.option("--sub-type", type=SUB_TYPES, help="Sub type (defaults per account type)")
@click.option("--parent", help="Parent account code or ID")
@click.option("--opening-balance", default="0", help="Opening balance on the normal side")
@click.option("--currency", help="3-letter currency code")
@click.option("--description", help="Account description")
@click.pass_context
def create_account(
    ctx,
    code: str,
    name: str,
    account_type: str,
    sub_type: str | None,
    parent: str | None,
    opening_balance: str,
    currency: str | None,
    description: str | None,
):
    """Create a new account.

    Examples:
        ledgerkit account create 1001 "Cash in Bank" --type asset
        ledgerkit account create 1110 "Petty Cash" --type asset --parent 1000
        ledgerkit account create 3100 "Share Capital" --type equity --sub-type owner_equity
    """
    require_write_access(ctx, "create accounts")
    service = _service(ctx)

    parent_id = resolve_account_or_exit(ctx, service, parent) if parent else None
    try:
        opening = parse_amount(opening_balance, allow_negative=True)
    except ValueError as e:
        handle_domain_error(ctx, e)

    try:
        acc = service.create_account(
            code=code,
            name=name,
            account_type=account_type,
            sub_type=sub_type,
            parent_id=parent_id,
            opening_balance=opening,
            currency=currency,
            description=description,
            actor_id=ctx.obj["actor"],
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account {acc.full_name} (ID: {acc.id})")


@account_group.command("list")
@click.option("--type", "account_type", type=ACCOUNT_TYPES, help="Only accounts of this type")
@click.option("--active-only", is_flag=True, help="Hide deactivated accounts")
@click.option("--search", help="Match code, name or description")
@click.pass_context
def list_accounts(ctx, account_type: str | None, active_only: bool, search: str | None):
    """List accounts ordered by code."""
    accounts = _service(ctx).list_accounts(
        account_type=account_type, include_inactive=not active_only, search=search
    )
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    echo_rule()
    for acc in accounts:
        status = "" if acc.is_active else " (inactive)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.code:8s} | {acc.name[:28]:28s} | "
            f"{acc.account_type.value:9s} | {format_amount(acc.balance):>14s}{status}"
        )


@account_group.command("show")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_account(ctx, account: str):
    """Show one account.

    ACCOUNT can be an account code or ID.
    """
    service = _service(ctx)
    acc = service.require_account(resolve_account_or_exit(ctx, service, account))

    click.echo(f"\n{acc.full_name}")
    echo_rule()
    click.echo(f"ID:              {acc.id}")
    click.echo(f"Type:            {acc.account_type.value} ({acc.sub_type.value})")
    click.echo(f"Normal side:     {acc.normal_side.value}")
    if acc.parent_id is not None:
        parent = service.get_account(acc.parent_id)
        click.echo(f"Parent:          {parent.full_name if parent else acc.parent_id}")
    click.echo(f"Level:           {acc.level}")
    click.echo(f"Status:          {'active' if acc.is_active else 'inactive'}")
    click.echo(f"Currency:        {acc.currency}")
    click.echo(f"Opening balance: {format_amount(acc.opening_balance)}")
    click.echo(f"Balance:         {format_amount(acc.balance)}")
    if acc.description:
        click.echo(f"Description:     {acc.description}")


@account_group.command("update")
@click.argument("account", metavar="ACCOUNT")
@click.option("--code", help="New account code")
@click.option("--name", help="New account name")
@click.option("--type", "account_type", type=ACCOUNT_TYPES, help="New type (unused accounts only)")
@click.option("--sub-type", type=SUB_TYPES, help="New sub type")
@click.option("--parent", help="New parent account code or ID")
@click.option("--no-parent", is_flag=True, help="Make this a top-level account")
@click.option("--description", help="New description")
@click.pass_context
def update_account(
    ctx,
    account: str,
    code: str | None,
    name: str | None,
    account_type: str | None,
    sub_type: str | None,
    parent: str | None,
    no_parent: bool,
    description: str | None,
):
    """Update an account.

    ACCOUNT can be an account code or ID. Balances cannot be edited; post a
    journal entry instead.

    Examples:
        ledgerkit account update 1110 --name "Operating Bank Account"
        ledgerkit account update 1120 --parent 1100
    """
    require_write_access(ctx, "update accounts")
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)
    parent_id = resolve_account_or_exit(ctx, service, parent) if parent else None

    try:
        acc = service.update_account(
            account_id,
            code=code,
            name=name,
            account_type=account_type,
            sub_type=sub_type,
            parent_id=parent_id,
            clear_parent=no_parent,
            description=description,
            actor_id=ctx.obj["actor"],
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated account {acc.full_name}")


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str):
    """Deactivate an account, keeping its balance and history."""
    require_write_access(ctx, "deactivate accounts")
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        acc = service.deactivate_account(account_id, actor_id=ctx.obj["actor"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated account {acc.full_name}")


@account_group.command("reactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def reactivate_account(ctx, account: str):
    """Reactivate a deactivated account."""
    require_write_access(ctx, "reactivate accounts")
    service = _service(ctx)
    account_id = resolve_account_or_exit(ctx, service, account)
    try:
        acc = service.reactivate_account(account_id, actor_id=ctx.obj["actor"])
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Reactivated account {acc.full_name}")


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool):
    """Delete an unused account.

    Accounts with child accounts or journal lines cannot be deleted; use
    'account deactivate' instead.
    """
    require_write_access(ctx, "delete accounts")
    service = _service(ctx)
    acc = service.require_account(resolve_account_or_exit(ctx, service, account))

    if not yes and not click.confirm(f"Are you sure you want to delete account {acc.full_name}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(acc.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted account {acc.full_name}")


@account_group.command("tree")
@click.option("--active-only", is_flag=True, help="Hide deactivated accounts")
@click.pass_context
def account_tree(ctx, active_only: bool):
    """Show the account hierarchy."""
    roots = _service(ctx).get_account_tree(include_inactive=not active_only)
    if not roots:
        click.echo("No accounts found.")
        return

    def show(node: AccountTreeNode, depth: int) -> None:
        acc = node.account
        status = "" if acc.is_active else " (inactive)"
        label = f"{'  ' * depth}{acc.full_name}{status}"
        click.echo(f"{label:54s} {format_amount(acc.balance):>18s}")
        for child in node.children:
            show(child, depth + 1)

    for root in roots:
        show(root, 0)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")

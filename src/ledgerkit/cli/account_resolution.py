"""CLI helpers for account and entry resolution."""

from __future__ import annotations

import click

from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.account_resolver import resolve_account, resolve_entry


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account code or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def resolve_entry_or_exit(
    ctx: click.Context, journal_service: JournalService, entry: str | int
) -> int:
    """Resolve journal number or entry ID, or exit with a CLI error."""
    try:
        return resolve_entry(journal_service, entry)
    except DomainError as exc:
        handle_domain_error(ctx, exc)

"""CLI error handling and access helpers."""

import click

from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.permissions import ensure_can_modify


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def require_write_access(ctx: click.Context, action: str) -> None:
    """Exit with an error unless the current role may change the ledger."""
    try:
        ensure_can_modify(ctx.obj["role"], action)
    except DomainError as e:
        handle_domain_error(ctx, e)

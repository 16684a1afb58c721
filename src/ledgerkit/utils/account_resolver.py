"""Utilities for resolving account codes and journal numbers to IDs."""

from ledgerkit.domain.account import AccountService
from ledgerkit.domain.errors import AccountNotFoundError, EntryNotFoundError, account_code_not_found
from ledgerkit.domain.journal import JournalService


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve an account code or ID to an account ID.

    Codes win over IDs: "1001" is looked up as a code first, since account
    codes are usually numeric.

    Args:
        account_service: AccountService instance
        account: Account code, or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        AccountNotFoundError: If no account matches
    """
    if isinstance(account, int):
        return account_service.require_account(account).id

    account = account.strip()
    found = account_service.get_account_by_code(account)
    if found is not None:
        return found.id

    if account.isdigit():
        found = account_service.get_account(int(account))
        if found is not None:
            return found.id

    raise AccountNotFoundError(account_code_not_found(account))


def resolve_entry(journal_service: JournalService, entry: str | int) -> int:
    """Resolve a journal number (e.g. JE000001) or entry ID to an entry ID.

    Raises:
        EntryNotFoundError: If no entry matches
    """
    if isinstance(entry, int):
        return journal_service.require_entry(entry).id

    entry = entry.strip()
    found = journal_service.get_entry_by_number(entry)
    if found is not None:
        return found.id

    if entry.isdigit():
        found = journal_service.get_entry(int(entry))
        if found is not None:
            return found.id

    raise EntryNotFoundError(f"Journal entry '{entry}' not found")

"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``kind`` is a stable
    identifier callers can branch on; the message is for humans.
    """

    kind = "DomainError"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    kind = "Validation"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    kind = "NotFound"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations or illegal transitions."""

    kind = "Conflict"


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""

    kind = "Dependency"


class IntegrityError(DomainError):
    """Operation would break a ledger invariant."""

    kind = "Integrity"


class PermissionDeniedError(DomainError):
    """Actor's role does not allow the operation."""

    kind = "PermissionDenied"


# Account registry
class AccountNotFoundError(NotFoundError):
    kind = "AccountNotFound"


class DuplicateCodeError(ConflictError):
    kind = "DuplicateCode"


class InvalidParentError(NotFoundError):
    kind = "InvalidParent"


class TypeMismatchError(IntegrityError):
    kind = "TypeMismatch"


class CircularParentError(IntegrityError):
    kind = "CircularParent"


class HasActiveChildrenError(DependencyError):
    kind = "HasActiveChildren"


# Journal entries
class EntryNotFoundError(NotFoundError):
    kind = "EntryNotFound"


class TooFewLinesError(ValidationError):
    kind = "TooFewLines"


class InvalidLineError(ValidationError):
    kind = "InvalidLine"


class UnknownAccountError(NotFoundError):
    kind = "UnknownAccount"


class UnbalancedEntryError(IntegrityError):
    kind = "Unbalanced"


class NotDraftError(ConflictError):
    kind = "NotDraft"


class NotPostedError(ConflictError):
    kind = "NotPosted"


class IrreversibleEntryError(ConflictError):
    kind = "Irreversible"


class LedgerConsistencyError(RuntimeError):
    """Stored ledger data contradicts posted history.

    This is an internal bug (or out-of-band tampering), never a user error,
    so it does not derive from DomainError.
    """

    def __init__(self, message: str, drifts: tuple = ()):
        super().__init__(message)
        self.drifts = drifts


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_code_not_found(code: str) -> str:
    """Return message for missing account by code."""
    return f"Account with code '{code}' not found"


def duplicate_account_code(code: str) -> str:
    """Return message for duplicate account code."""
    return f"Account with code '{code}' already exists"


def parent_type_mismatch(parent_code: str, parent_type: str, account_type: str) -> str:
    """Return message when parent and child account types differ."""
    return (
        f"Parent account '{parent_code}' is of type '{parent_type}', "
        f"but the account is of type '{account_type}'"
    )


def entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def entry_not_draft(journal_number: str, status: str, action: str) -> str:
    """Return message when a draft-only action hits a non-draft entry."""
    return f"Cannot {action} journal entry {journal_number}: it is {status}, not draft"


def unbalanced_entry(total_debit: Decimal, total_credit: Decimal) -> str:
    """Return message for debits and credits that do not match."""
    return (
        f"Journal entry is not balanced: debits {total_debit} "
        f"!= credits {total_credit}"
    )


def account_delete_blocked(account_id: int, child_count: int, line_count: int) -> str:
    """Return message when account has child accounts or journal lines."""
    parts = []
    if child_count > 0:
        parts.append(f"{child_count} child account{'s' if child_count != 1 else ''}")
    if line_count > 0:
        parts.append(f"{line_count} journal line{'s' if line_count != 1 else ''}")
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Deactivate it instead."
    )

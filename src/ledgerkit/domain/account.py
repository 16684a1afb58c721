"""Account registry domain service."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from ledgerkit.config import LedgerConfig
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    Account,
    AccountSubType,
    AccountTreeNode,
    AccountType,
)
from ledgerkit.domain.errors import (
    AccountNotFoundError,
    CircularParentError,
    DependencyError,
    DuplicateCodeError,
    HasActiveChildrenError,
    InvalidParentError,
    TypeMismatchError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_code,
    parent_type_mismatch,
)

logger = logging.getLogger(__name__)

MAX_CODE_LENGTH = 20
MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 500


def coerce_account_type(value: AccountType | str) -> AccountType:
    """Accept an AccountType or its string value."""
    if isinstance(value, AccountType):
        return value
    try:
        return AccountType(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{value}'. Valid types: {valid}")


def coerce_sub_type(value: AccountSubType | str) -> AccountSubType:
    """Accept an AccountSubType or its string value."""
    if isinstance(value, AccountSubType):
        return value
    try:
        return AccountSubType(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(t.value for t in AccountSubType)
        raise ValidationError(f"Invalid account sub type '{value}'. Valid sub types: {valid}")


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database, config: Optional[LedgerConfig] = None):
        """Initialize account service.

        Args:
            db: Database instance
            config: Ledger configuration (defaults apply if omitted)
        """
        self.db = db
        self.config = config or LedgerConfig()

    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType | str,
        sub_type: AccountSubType | str | None = None,
        parent_id: Optional[int] = None,
        opening_balance: Decimal | str | int = Decimal("0"),
        currency: Optional[str] = None,
        description: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Account:
        """Create a new account.

        Args:
            code: Unique human-readable account code (e.g. "1001")
            name: Account name
            account_type: Account type
            sub_type: Sub type refining the account type (defaults per type)
            parent_id: Optional parent account ID; parent must share the type
            opening_balance: Starting balance on the account's normal side
            currency: ISO currency code (defaults to the configured currency)
            description: Optional description
            actor_id: Who is creating the account

        Returns:
            The created account

        Raises:
            ValidationError: If a field is malformed
            DuplicateCodeError: If the code is already used
            InvalidParentError: If the parent does not exist or is inactive
            TypeMismatchError: If the parent's type differs
        """
        code = self._validate_code(code)
        name = self._validate_name(name)
        account_type = coerce_account_type(account_type)
        sub_type = self._resolve_sub_type(account_type, sub_type)
        opening_balance = self._validate_amount(opening_balance)
        currency = (currency or self.config.default_currency).strip().upper()
        if len(currency) != 3:
            raise ValidationError(f"Currency must be a 3-letter code, got '{currency}'")
        description = self._validate_description(description)

        with self.db.transaction():
            if self.db.get_account_by_code(code) is not None:
                raise DuplicateCodeError(duplicate_account_code(code))

            level = 0
            if parent_id is not None:
                parent = self.db.get_account(parent_id)
                if parent is None:
                    raise InvalidParentError(f"Parent account {parent_id} not found")
                if not parent.is_active:
                    raise InvalidParentError(f"Parent account '{parent.code}' is inactive")
                if parent.account_type != account_type:
                    raise TypeMismatchError(
                        parent_type_mismatch(parent.code, parent.account_type.value, account_type.value)
                    )
                level = parent.level + 1
                self._check_level(level)

            account = self.db.create_account(
                code=code,
                name=name,
                account_type=account_type,
                sub_type=sub_type,
                parent_id=parent_id,
                level=level,
                opening_balance=opening_balance,
                currency=currency,
                description=description,
                created_by=actor_id,
            )

        logger.info("Created account %s (%s)", account.code, account.account_type.value)
        return account

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by code."""
        return self.db.get_account_by_code(code.strip())

    def require_account(self, account_id: int) -> Account:
        """Get account by ID or raise AccountNotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_not_found(account_id))
        return account

    def list_accounts(
        self,
        account_type: AccountType | str | None = None,
        include_inactive: bool = True,
        search: Optional[str] = None,
    ) -> list[Account]:
        """List accounts ordered by code.

        Args:
            account_type: Optional type filter
            include_inactive: If False, only active accounts are returned
            search: Optional substring matched against code, name and description

        Returns:
            List of account entities
        """
        if account_type is not None:
            account_type = coerce_account_type(account_type)
        return self.db.list_accounts(
            account_type=account_type, include_inactive=include_inactive, search=search
        )

    def get_account_tree(self, include_inactive: bool = True) -> list[AccountTreeNode]:
        """Get the chart of accounts as a forest of root accounts.

        Returns:
            Root nodes ordered by code, each with nested children
        """
        accounts = self.db.list_accounts(include_inactive=include_inactive)
        children: dict[Optional[int], list[Account]] = {}
        for acc in accounts:
            children.setdefault(acc.parent_id, []).append(acc)
        known_ids = {acc.id for acc in accounts}

        def build(acc: Account) -> AccountTreeNode:
            return AccountTreeNode(
                account=acc,
                children=tuple(build(child) for child in children.get(acc.id, [])),
            )

        # Accounts whose parent was filtered out are shown as roots
        roots = [acc for acc in accounts if acc.parent_id is None or acc.parent_id not in known_ids]
        return [build(acc) for acc in roots]

    def update_account(
        self,
        account_id: int,
        *,
        code: Optional[str] = None,
        name: Optional[str] = None,
        account_type: AccountType | str | None = None,
        sub_type: AccountSubType | str | None = None,
        parent_id: Optional[int] = None,
        clear_parent: bool = False,
        description: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Account:
        """Update an account.

        Only the given fields change. Balances are never touched here.

        Args:
            account_id: Account ID to update
            code: New unique code
            name: New name
            account_type: New type (only for accounts without lines or children)
            sub_type: New sub type
            parent_id: New parent account ID
            clear_parent: If True, make the account a root account
            description: New description
            actor_id: Who is making the change

        Returns:
            The updated account

        Raises:
            AccountNotFoundError: If the account does not exist
            DuplicateCodeError: If the new code is taken
            InvalidParentError: If the new parent does not exist
            TypeMismatchError: If parent and account types would differ
            CircularParentError: If the new parent is the account or a descendant
        """
        if clear_parent and parent_id is not None:
            raise ValidationError("Cannot set a parent and clear it at the same time")

        with self.db.transaction():
            account = self.require_account(account_id)
            fields: dict = {"updated_by": actor_id}

            if code is not None:
                code = self._validate_code(code)
                if code != account.code:
                    existing = self.db.get_account_by_code(code)
                    if existing is not None and existing.id != account_id:
                        raise DuplicateCodeError(duplicate_account_code(code))
                    fields["code"] = code

            if name is not None:
                fields["name"] = self._validate_name(name)

            if description is not None:
                fields["description"] = self._validate_description(description)

            new_type = account.account_type
            if account_type is not None:
                new_type = coerce_account_type(account_type)
                if new_type != account.account_type:
                    self._check_type_change_allowed(account)
                    fields["account_type"] = new_type

            if sub_type is not None:
                fields["sub_type"] = self._resolve_sub_type(new_type, sub_type)
            elif new_type != account.account_type:
                fields["sub_type"] = new_type.default_sub_type

            new_parent_id = account.parent_id
            if clear_parent:
                new_parent_id = None
            elif parent_id is not None:
                new_parent_id = parent_id

            new_level = account.level
            if new_parent_id is None:
                new_level = 0
            elif new_parent_id != account.parent_id or new_type != account.account_type:
                parent = self._validate_new_parent(account_id, new_parent_id, new_type)
                new_level = parent.level + 1

            if new_parent_id != account.parent_id:
                fields["parent_id"] = new_parent_id
            if new_level != account.level:
                self._check_level(new_level + self._subtree_depth(account_id))
                fields["level"] = new_level

            updated = self.db.update_account(account_id, **fields)
            if new_level != account.level:
                self._relevel_descendants(updated, actor_id)

        return updated

    def deactivate_account(self, account_id: int, actor_id: Optional[str] = None) -> Account:
        """Soft-delete an account.

        The balance and all journal history are kept.

        Raises:
            AccountNotFoundError: If the account does not exist
            HasActiveChildrenError: If any child account is still active
        """
        with self.db.transaction():
            account = self.require_account(account_id)
            if not account.is_active:
                return account

            active_children = [c for c in self.db.list_child_accounts(account_id) if c.is_active]
            if active_children:
                codes = ", ".join(c.code for c in active_children)
                raise HasActiveChildrenError(
                    f"Cannot deactivate account '{account.code}': active child accounts {codes}"
                )
            account = self.db.update_account(account_id, is_active=False, updated_by=actor_id)

        logger.info("Deactivated account %s (balance %s)", account.code, account.balance)
        return account

    def reactivate_account(self, account_id: int, actor_id: Optional[str] = None) -> Account:
        """Re-enable a deactivated account.

        Raises:
            AccountNotFoundError: If the account does not exist
            DependencyError: If the parent account is inactive
        """
        with self.db.transaction():
            account = self.require_account(account_id)
            if account.is_active:
                return account
            if account.parent_id is not None:
                parent = self.require_account(account.parent_id)
                if not parent.is_active:
                    raise DependencyError(
                        f"Cannot reactivate account '{account.code}': "
                        f"parent account '{parent.code}' is inactive"
                    )
            return self.db.update_account(account_id, is_active=True, updated_by=actor_id)

    def delete_account(self, account_id: int) -> None:
        """Hard-delete an account that nothing references.

        Raises:
            AccountNotFoundError: If the account does not exist
            DependencyError: If the account has child accounts or journal lines
        """
        with self.db.transaction():
            self.require_account(account_id)
            child_count = len(self.db.list_child_accounts(account_id))
            line_count = self.db.count_account_lines(account_id)
            if child_count > 0 or line_count > 0:
                raise DependencyError(account_delete_blocked(account_id, child_count, line_count))
            self.db.delete_account(account_id)

    def _validate_new_parent(self, account_id: int, parent_id: int, account_type: AccountType) -> Account:
        """Check that parent_id can become the parent of account_id."""
        if parent_id == account_id:
            raise CircularParentError(f"Account {account_id} cannot be its own parent")

        parent = self.db.get_account(parent_id)
        if parent is None:
            raise InvalidParentError(f"Parent account {parent_id} not found")
        if parent.account_type != account_type:
            raise TypeMismatchError(
                parent_type_mismatch(parent.code, parent.account_type.value, account_type.value)
            )

        # Walk up from the new parent; meeting the account means a cycle
        seen = set()
        current = parent
        while current.parent_id is not None:
            if current.parent_id == account_id:
                raise CircularParentError(
                    f"Account {account_id} cannot be moved under its descendant '{parent.code}'"
                )
            if current.parent_id in seen:
                break
            seen.add(current.parent_id)
            current = self.db.get_account(current.parent_id)
            if current is None:
                break
        return parent

    def _subtree_depth(self, account_id: int) -> int:
        """Depth of the deepest descendant below an account (0 for leaves)."""
        children = self.db.list_child_accounts(account_id)
        if not children:
            return 0
        return 1 + max(self._subtree_depth(child.id) for child in children)

    def _relevel_descendants(self, account: Account, actor_id: Optional[str]) -> None:
        for child in self.db.list_child_accounts(account.id):
            child = self.db.update_account(child.id, level=account.level + 1, updated_by=actor_id)
            self._relevel_descendants(child, actor_id)

    def _check_type_change_allowed(self, account: Account) -> None:
        line_count = self.db.count_account_lines(account.id)
        child_count = len(self.db.list_child_accounts(account.id))
        if line_count > 0 or child_count > 0:
            raise TypeMismatchError(
                f"Cannot change type of account '{account.code}': "
                "it has journal lines or child accounts"
            )

    def _check_level(self, level: int) -> None:
        if level > self.config.max_account_level:
            raise ValidationError(
                f"Account hierarchy cannot be deeper than {self.config.max_account_level} levels"
            )

    @staticmethod
    def _resolve_sub_type(
        account_type: AccountType, sub_type: AccountSubType | str | None
    ) -> AccountSubType:
        if sub_type is None:
            return account_type.default_sub_type
        sub_type = coerce_sub_type(sub_type)
        if sub_type.account_type != account_type:
            raise ValidationError(
                f"Sub type '{sub_type.value}' does not belong to account type '{account_type.value}'"
            )
        return sub_type

    @staticmethod
    def _validate_code(code: str) -> str:
        code = (code or "").strip()
        if not code:
            raise ValidationError("Account code is required")
        if len(code) > MAX_CODE_LENGTH:
            raise ValidationError(f"Account code cannot exceed {MAX_CODE_LENGTH} characters")
        return code

    @staticmethod
    def _validate_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Account name cannot exceed {MAX_NAME_LENGTH} characters")
        return name

    @staticmethod
    def _validate_description(description: Optional[str]) -> Optional[str]:
        if description is None:
            return None
        description = description.strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Account description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"
            )
        return description or None

    @staticmethod
    def _validate_amount(amount: Decimal | str | int) -> Decimal:
        if isinstance(amount, float):
            raise ValidationError(f"Amount {amount!r} is a float; pass a Decimal or string")
        try:
            value = Decimal(amount)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid amount '{amount}'")
        if not value.is_finite():
            raise ValidationError(f"Invalid amount '{amount}'")
        return value

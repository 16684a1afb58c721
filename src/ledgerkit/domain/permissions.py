"""Role checks for ledger operations."""

from ledgerkit.domain.entities import Role
from ledgerkit.domain.errors import PermissionDeniedError, ValidationError

# Roles allowed to create, change, post and reverse; everyone may read reports
WRITE_ROLES = frozenset({Role.ADMIN, Role.ACCOUNTANT})


def coerce_role(value: Role | str) -> Role:
    """Accept a Role or its string value."""
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(r.value for r in Role)
        raise ValidationError(f"Invalid role '{value}'. Valid roles: {valid}")


def can_modify(role: Role | str) -> bool:
    return coerce_role(role) in WRITE_ROLES


def ensure_can_modify(role: Role | str, action: str = "modify the ledger") -> None:
    """Raise PermissionDeniedError unless the role may write.

    Args:
        role: Actor role
        action: Description of the attempted action for the message
    """
    role = coerce_role(role)
    if role not in WRITE_ROLES:
        raise PermissionDeniedError(f"Role '{role.value}' is not allowed to {action}")

"""
Enums for account sharing, permission requests and the audit trail.

This module defines:
- PermissionLevel: Ordered permission levels for shared accounts
- Capability: Actions a caller can attempt on an account
- RequestStatus: Lifecycle states of a permission request
- AuditAction: Security-relevant action types recorded in the audit log

Hierarchy (lowest to highest):
    VIEW_ONLY (1) < TRANSACTION_ONLY (2) < FULL_ACCESS (3)

Permission Matrix:
    | Operation              | View Only | Transaction Only | Full Access |
    |------------------------|-----------|------------------|-------------|
    | View account / history |     ✓     |        ✓         |      ✓      |
    | Add transactions       |     ✗     |        ✓         |      ✓      |
    | Modify account/balance |     ✗     |        ✗         |      ✓      |
    | Manage permissions     |   owner only, independent of any grant      |
"""

import enum


class PermissionLevel(str, enum.Enum):
    """
    Permission level granted to a non-owner user on a shared account.

    The account owner never holds a grant; ownership implies the maximum
    level. Levels are totally ordered by ``level``.
    """

    VIEW_ONLY = "VIEW_ONLY"
    TRANSACTION_ONLY = "TRANSACTION_ONLY"
    FULL_ACCESS = "FULL_ACCESS"

    @property
    def level(self) -> int:
        return _LEVELS[self]

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def includes(self, other: "PermissionLevel") -> bool:
        """True when this level grants everything ``other`` grants."""
        return self.level >= other.level

    def can_view(self) -> bool:
        return self.includes(PermissionLevel.VIEW_ONLY)

    def can_manage_transactions(self) -> bool:
        return self.includes(PermissionLevel.TRANSACTION_ONLY)

    def can_modify_account(self) -> bool:
        return self.includes(PermissionLevel.FULL_ACCESS)

    def next_level(self) -> "PermissionLevel | None":
        """The next higher level, or None at the top."""
        return from_level(self.level + 1)

    def previous_level(self) -> "PermissionLevel | None":
        """The next lower level, or None at the bottom."""
        return from_level(self.level - 1)


_LEVELS = {
    PermissionLevel.VIEW_ONLY: 1,
    PermissionLevel.TRANSACTION_ONLY: 2,
    PermissionLevel.FULL_ACCESS: 3,
}

_DISPLAY_NAMES = {
    PermissionLevel.VIEW_ONLY: "View Only",
    PermissionLevel.TRANSACTION_ONLY: "Transaction Only",
    PermissionLevel.FULL_ACCESS: "Full Access",
}

_DESCRIPTIONS = {
    PermissionLevel.VIEW_ONLY: "Can view account details and transaction history",
    PermissionLevel.TRANSACTION_ONLY: "Can view account details and add transactions",
    PermissionLevel.FULL_ACCESS: (
        "Full access including account modification and balance updates"
    ),
}


def from_level(level: int) -> PermissionLevel | None:
    """Look up a PermissionLevel by its numeric rank."""
    for permission, rank in _LEVELS.items():
        if rank == level:
            return permission
    return None


def includes(a: PermissionLevel, b: PermissionLevel) -> bool:
    """Ordering law: ``a`` includes ``b`` iff level(a) >= level(b)."""
    return a.includes(b)


def can_view(level: PermissionLevel) -> bool:
    return level.can_view()


def can_manage_transactions(level: PermissionLevel) -> bool:
    return level.can_manage_transactions()


def can_modify_account(level: PermissionLevel) -> bool:
    return level.can_modify_account()


class Capability(str, enum.Enum):
    """Capability checked by the access evaluator."""

    VIEW = "VIEW"
    TRANSACTION = "TRANSACTION"
    FULL = "FULL"

    @property
    def threshold(self) -> PermissionLevel:
        """Minimum permission level that grants this capability."""
        return _THRESHOLDS[self]


_THRESHOLDS = {
    Capability.VIEW: PermissionLevel.VIEW_ONLY,
    Capability.TRANSACTION: PermissionLevel.TRANSACTION_ONLY,
    Capability.FULL: PermissionLevel.FULL_ACCESS,
}


def threshold_for(capability: Capability) -> PermissionLevel:
    return capability.threshold


class RequestStatus(str, enum.Enum):
    """
    Permission request lifecycle.

    PENDING is the only non-terminal state. APPROVED, DENIED and CANCELLED
    are terminal: no transition leaves them.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING

    @classmethod
    def terminal_states(cls) -> tuple["RequestStatus", ...]:
        return tuple(s for s in cls if s.is_terminal)


class AuditAction(str, enum.Enum):
    """Security-relevant action types recorded in the audit log."""

    # Permission management
    PERMISSION_GRANTED = "PERMISSION_GRANTED"
    PERMISSION_MODIFIED = "PERMISSION_MODIFIED"
    PERMISSION_REVOKED = "PERMISSION_REVOKED"

    # Permission request workflow
    PERMISSION_REQUESTED = "PERMISSION_REQUESTED"
    PERMISSION_REQUEST_APPROVED = "PERMISSION_REQUEST_APPROVED"
    PERMISSION_REQUEST_DENIED = "PERMISSION_REQUEST_DENIED"
    PERMISSION_REQUEST_CANCELLED = "PERMISSION_REQUEST_CANCELLED"

    # Account activity
    ACCOUNT_VIEWED = "ACCOUNT_VIEWED"
    ACCOUNT_MODIFIED = "ACCOUNT_MODIFIED"

    # Transaction activity
    TRANSACTION_ADDED = "TRANSACTION_ADDED"
    TRANSACTION_MODIFIED = "TRANSACTION_MODIFIED"
    TRANSACTION_DELETED = "TRANSACTION_DELETED"

"""
Access evaluation rules.

Pure functions deciding what a user may do on an account, given the account
and the grant level the user holds on it (None for no grant). They never
touch the database; PermissionService loads the inputs and applies them.

Rules:
    - The owner has every capability, shared or not.
    - A non-owner has access only while the account is shared AND they hold
      a grant; their capabilities follow the grant level.
    - Managing permissions is reserved to the owner and does not depend on
      the shared flag or on any grant.
"""

import uuid

from checkbook.models.account import Account
from checkbook.models.enums import Capability, PermissionLevel


def is_owner(account: Account | None, user_id: uuid.UUID) -> bool:
    return account is not None and account.user_id == user_id


def effective_permission(
    account: Account | None,
    user_id: uuid.UUID,
    grant_level: PermissionLevel | None,
) -> PermissionLevel | None:
    """
    The level the user can currently exercise on the account.

    Returns:
        FULL_ACCESS for the owner, the grant level for a grantee of a
        shared account, otherwise None
    """
    if account is None:
        return None
    if is_owner(account, user_id):
        return PermissionLevel.FULL_ACCESS
    if account.is_shared and grant_level is not None:
        return grant_level
    return None


def has_any_access(
    account: Account | None,
    user_id: uuid.UUID,
    grant_level: PermissionLevel | None,
) -> bool:
    return effective_permission(account, user_id, grant_level) is not None


def has_capability(
    account: Account | None,
    user_id: uuid.UUID,
    grant_level: PermissionLevel | None,
    capability: Capability,
) -> bool:
    level = effective_permission(account, user_id, grant_level)
    return level is not None and level.includes(capability.threshold)


def can_manage_permissions(account: Account | None, user_id: uuid.UUID) -> bool:
    return is_owner(account, user_id)


# Action names accepted by can_perform_action
ACTION_CAPABILITIES: dict[str, Capability | None] = {
    "VIEW": Capability.VIEW,
    "READ": Capability.VIEW,
    "ADD_TRANSACTION": Capability.TRANSACTION,
    "TRANSACTION": Capability.TRANSACTION,
    "MODIFY": Capability.FULL,
    "UPDATE": Capability.FULL,
    "DELETE": Capability.FULL,
    "BALANCE_UPDATE": Capability.FULL,
    "MANAGE_PERMISSIONS": None,  # owner only
}


def can_perform_action(
    account: Account | None,
    user_id: uuid.UUID,
    grant_level: PermissionLevel | None,
    action: str,
) -> bool:
    """
    Check a named action. Unknown action names are denied.

    Example:
        >>> can_perform_action(account, grantee_id, PermissionLevel.VIEW_ONLY, "read")
        True
    """
    key = action.strip().upper()
    if key not in ACTION_CAPABILITIES:
        return False
    capability = ACTION_CAPABILITIES[key]
    if capability is None:
        return can_manage_permissions(account, user_id)
    return has_capability(account, user_id, grant_level, capability)

"""
Permission service for account access control.

This module loads the account and the caller's grant from the permission
store and applies the rules in checkbook.services.access.

Permission Levels:
    - FULL_ACCESS: view, transactions, account modification
    - TRANSACTION_ONLY: view and add transactions
    - VIEW_ONLY: view account details and history

The owner holds FULL_ACCESS implicitly and is the only user who can manage
permissions.

Usage:
    permission_service = PermissionService(session)
    can_add = await permission_service.has_capability(
        account_id=account.id,
        user_id=user.id,
        capability=Capability.TRANSACTION,
    )
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.exceptions import (
    AccountNotAccessibleError,
    EvaluationUnavailableError,
    ForbiddenError,
    InsufficientPermissionsError,
)
from checkbook.models.account import Account
from checkbook.models.enums import Capability, PermissionLevel
from checkbook.repositories.account_permission_repository import (
    AccountPermissionRepository,
)
from checkbook.repositories.account_repository import AccountRepository
from checkbook.services import access

logger = logging.getLogger(__name__)


class PermissionService:
    """
    Service for checking account access permissions.

    Query methods return False / None for a missing account or grant. A
    failure of the permission store raises EvaluationUnavailableError; it is
    never turned into a silent deny.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.account_repo = AccountRepository(session)
        self.permission_repo = AccountPermissionRepository(session)

    async def _load(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> tuple[Account | None, PermissionLevel | None]:
        """Fetch the account and, for non-owners, their grant level."""
        try:
            account = await self.account_repo.get_by_id(account_id)
            if account is None or account.user_id == user_id:
                return account, None
            grant_level = await self.permission_repo.get_level(account_id, user_id)
        except SQLAlchemyError as e:
            logger.error(
                f"Permission evaluation failed for user {user_id} "
                f"on account {account_id}: {e}"
            )
            raise EvaluationUnavailableError() from e
        return account, grant_level

    async def get_effective_permission(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> PermissionLevel | None:
        """
        Get the permission level the user can currently exercise.

        Returns:
            FULL_ACCESS for the owner, the grant level for a grantee of a
            shared account, None otherwise
        """
        account, grant_level = await self._load(account_id, user_id)
        return access.effective_permission(account, user_id, grant_level)

    async def is_owner(self, account_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        account, _ = await self._load(account_id, user_id)
        return access.is_owner(account, user_id)

    async def has_any_access(self, account_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        account, grant_level = await self._load(account_id, user_id)
        return access.has_any_access(account, user_id, grant_level)

    async def has_capability(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        capability: Capability,
    ) -> bool:
        account, grant_level = await self._load(account_id, user_id)
        return access.has_capability(account, user_id, grant_level, capability)

    async def can_manage_permissions(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> bool:
        account, _ = await self._load(account_id, user_id)
        return access.can_manage_permissions(account, user_id)

    async def can_view(self, account_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.has_capability(account_id, user_id, Capability.VIEW)

    async def can_manage_transactions(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> bool:
        return await self.has_capability(account_id, user_id, Capability.TRANSACTION)

    async def can_modify_account(self, account_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        return await self.has_capability(account_id, user_id, Capability.FULL)

    async def can_perform_action(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        action: str,
    ) -> bool:
        account, grant_level = await self._load(account_id, user_id)
        return access.can_perform_action(account, user_id, grant_level, action)

    async def require_access(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        capability: Capability = Capability.VIEW,
    ) -> Account:
        """
        Require a capability on the account, raise if missing.

        Returns:
            The account

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
                (the two cases are indistinguishable)
            InsufficientPermissionsError: Caller has access below the required level

        Example:
            account = await permission_service.require_access(
                account_id, user.id, Capability.TRANSACTION
            )
        """
        account, grant_level = await self._load(account_id, user_id)
        level = access.effective_permission(account, user_id, grant_level)

        if account is None or level is None:
            raise AccountNotAccessibleError()

        if not level.includes(capability.threshold):
            raise InsufficientPermissionsError(
                f"You don't have permission to perform this action. "
                f"Required: {capability.threshold.value}, "
                f"Current: {level.value}",
                details={
                    "required": capability.threshold.value,
                    "current": level.value,
                },
            )
        return account

    async def require_owner(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        message: str = "Only the account owner can manage permissions",
    ) -> Account:
        """
        Require the caller to own the account.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            ForbiddenError: Caller has access but is not the owner
        """
        account, grant_level = await self._load(account_id, user_id)

        if access.can_manage_permissions(account, user_id):
            return account  # type: ignore[return-value]

        if not access.has_any_access(account, user_id, grant_level):
            raise AccountNotAccessibleError()

        raise ForbiddenError(message)

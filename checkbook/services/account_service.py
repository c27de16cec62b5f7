"""
Account service for the collaborator operations the permission subsystem needs.

This module provides:
- Create account (owned by the caller)
- Get account (any access, recorded as ACCOUNT_VIEWED)
- Toggle the shared flag (full access, recorded as ACCOUNT_MODIFIED)
- Delete account (owner only; grants and requests go with it, audit entries stay)

Balances and transactions are maintained elsewhere.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.models.account import Account
from checkbook.models.enums import Capability
from checkbook.repositories.account_repository import AccountRepository
from checkbook.services.audit_service import AuditService
from checkbook.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class AccountService:
    """Service class for account operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.account_repo = AccountRepository(session)
        self.permission_service = PermissionService(session)
        self.audit_service = AuditService(session)

    async def create_account(
        self,
        owner_id: uuid.UUID,
        name: str,
        description: str | None = None,
        is_shared: bool = False,
    ) -> Account:
        """
        Create an account owned by ``owner_id``.

        The owner never receives a grant row; ownership alone gives full access.
        """
        account = await self.account_repo.add(
            Account(
                user_id=owner_id,
                name=name,
                description=description,
                is_shared=is_shared,
            )
        )
        await self.session.commit()

        logger.info(f"User {owner_id} created account {account.id}")
        return account

    async def get_account(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Account:
        """
        Get an account the caller can view.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
        """
        account = await self.permission_service.require_access(
            account_id, user_id, Capability.VIEW
        )
        await self.audit_service.log_account_viewed(
            account_id, user_id, ip_address=ip_address, user_agent=user_agent
        )
        await self.session.commit()
        return account

    async def list_owned_accounts(self, owner_id: uuid.UUID) -> list[Account]:
        return await self.account_repo.get_by_owner(owner_id)

    async def set_sharing(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        is_shared: bool,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Account:
        """
        Turn sharing on or off.

        Grants are kept when sharing is turned off; they stop taking effect
        until sharing is turned back on.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            InsufficientPermissionsError: Caller has less than FULL_ACCESS
        """
        account = await self.permission_service.require_access(
            account_id, user_id, Capability.FULL
        )
        old_value = account.is_shared
        account.is_shared = is_shared
        account = await self.account_repo.update(account)

        await self.audit_service.log_account_modified(
            account_id, user_id,
            changes={"is_shared": {"old": old_value, "new": is_shared}},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(
            f"User {user_id} set sharing of account {account_id}: "
            f"{old_value} -> {is_shared}"
        )
        return account

    async def delete_account(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Delete an account with its grants and permission requests.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            ForbiddenError: Caller is not the owner
        """
        account = await self.permission_service.require_owner(
            account_id, user_id, message="Only the account owner can delete the account"
        )

        await self.audit_service.log_account_modified(
            account_id, user_id,
            changes={"deleted": True, "name": account.name},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.account_repo.delete(account)
        await self.session.commit()

        logger.info(f"User {user_id} deleted account {account_id}")

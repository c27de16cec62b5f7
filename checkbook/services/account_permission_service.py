"""
Account permission service: direct grant management by the account owner.

This module provides:
- Granting a permission level (create or overwrite)
- Changing an existing grant's level
- Revoking a grant
- Listing grants for an account or a user

Each command runs in one transaction and appends exactly one audit entry.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.exceptions import InvalidRequestError, NotFoundError
from checkbook.models.account_permission import AccountPermission
from checkbook.models.enums import PermissionLevel
from checkbook.models.user import User
from checkbook.repositories.account_permission_repository import (
    AccountPermissionRepository,
)
from checkbook.repositories.user_repository import UserRepository
from checkbook.services.audit_service import AuditService
from checkbook.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class AccountPermissionService:
    """Service for owner-managed account permissions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.permission_repo = AccountPermissionRepository(session)
        self.user_repo = UserRepository(session)
        self.permission_service = PermissionService(session)
        self.audit_service = AuditService(session)

    async def _resolve_target(
        self,
        target_user_id: uuid.UUID | None,
        username_or_email: str | None,
    ) -> User:
        target: User | None = None
        if target_user_id is not None:
            target = await self.user_repo.get_by_id(target_user_id)
        elif username_or_email:
            target = await self.user_repo.get_by_username_or_email(username_or_email)
        if target is None:
            raise NotFoundError("User")
        return target

    async def grant_permission(
        self,
        account_id: uuid.UUID,
        current_user_id: uuid.UUID,
        permission_level: PermissionLevel,
        target_user_id: uuid.UUID | None = None,
        username_or_email: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AccountPermission:
        """
        Grant a permission level on an account to another user.

        Creates the grant, or overwrites the level if the user already holds
        one. Granting on an unshared account marks it shared.

        Args:
            account_id: Account to share
            current_user_id: Caller (must be the owner)
            permission_level: Level to grant
            target_user_id: Grantee, by id
            username_or_email: Grantee, by username or email (if no id)
            ip_address: Client IP address for audit logging
            user_agent: Client user agent for audit logging

        Returns:
            The stored grant

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            ForbiddenError: Caller is not the owner
            NotFoundError: Target user not found
            InvalidRequestError: Target user is the owner
        """
        account = await self.permission_service.require_owner(account_id, current_user_id)
        target = await self._resolve_target(target_user_id, username_or_email)

        if target.id == account.user_id:
            raise InvalidRequestError("Cannot grant permission to yourself")

        previous_level = await self.permission_repo.get_level(account_id, target.id)

        extra: dict[str, object] = {"account_name": account.name}
        if not account.is_shared:
            account.is_shared = True
            extra["account_shared"] = True

        grant = await self.permission_repo.upsert(
            account_id=account_id,
            user_id=target.id,
            permission_level=permission_level,
            created_by=current_user_id,
        )

        if previous_level is None:
            await self.audit_service.log_permission_granted(
                account_id, current_user_id, target.id, permission_level,
                extra=extra, ip_address=ip_address, user_agent=user_agent,
            )
        else:
            await self.audit_service.log_permission_modified(
                account_id, current_user_id, target.id, previous_level, permission_level,
                extra=extra, ip_address=ip_address, user_agent=user_agent,
            )
        await self.session.commit()

        logger.info(
            f"User {current_user_id} granted {permission_level.value} on account "
            f"{account_id} to user {target.id} (previous={previous_level})"
        )
        return grant

    async def update_permission(
        self,
        account_id: uuid.UUID,
        current_user_id: uuid.UUID,
        target_user_id: uuid.UUID,
        permission_level: PermissionLevel,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AccountPermission:
        """
        Change the level of an existing grant.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            ForbiddenError: Caller is not the owner
            NotFoundError: The user holds no grant on the account
        """
        account = await self.permission_service.require_owner(account_id, current_user_id)

        grant = await self.permission_repo.get(account_id, target_user_id)
        if grant is None:
            raise NotFoundError("Permission")

        old_level = grant.permission_level
        grant.permission_level = permission_level
        grant = await self.permission_repo.update(grant)

        await self.audit_service.log_permission_modified(
            account_id, current_user_id, target_user_id, old_level, permission_level,
            extra={"account_name": account.name},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(
            f"User {current_user_id} changed permission of user {target_user_id} "
            f"on account {account_id}: {old_level.value} -> {permission_level.value}"
        )
        return grant

    async def revoke_permission(
        self,
        account_id: uuid.UUID,
        current_user_id: uuid.UUID,
        target_user_id: uuid.UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """
        Revoke a user's grant on an account.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            ForbiddenError: Caller is not the owner
            NotFoundError: The user holds no grant on the account
        """
        account = await self.permission_service.require_owner(account_id, current_user_id)

        grant = await self.permission_repo.get(account_id, target_user_id)
        if grant is None:
            raise NotFoundError("Permission")

        revoked_level = grant.permission_level
        await self.permission_repo.delete(grant)

        await self.audit_service.log_permission_revoked(
            account_id, current_user_id, target_user_id, revoked_level,
            extra={"account_name": account.name},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(
            f"User {current_user_id} revoked {revoked_level.value} of user "
            f"{target_user_id} on account {account_id}"
        )

    async def list_permissions(
        self,
        account_id: uuid.UUID,
        current_user_id: uuid.UUID,
    ) -> list[AccountPermission]:
        """
        List grants on an account.

        The owner sees every grant. A grantee sees only their own, without
        learning who else has access.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
        """
        account = await self.permission_service.require_access(account_id, current_user_id)

        if account.user_id == current_user_id:
            return await self.permission_repo.list_for_account(account_id)

        own = await self.permission_repo.get(account_id, current_user_id)
        return [own] if own is not None else []

    async def list_user_permissions(self, user_id: uuid.UUID) -> list[AccountPermission]:
        """Grants held by the user across all accounts, newest first."""
        return await self.permission_repo.list_for_user(user_id)

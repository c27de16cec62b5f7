"""
AccountPermission repository (the permission store).

This module provides database operations for AccountPermission, including:
- Grant lookups for a (account, user) pair
- Atomic insert-or-overwrite (upsert) of grants
- Plain insert that reports duplicates
- Listing grants by account and by user
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.exceptions import DuplicateGrantError
from checkbook.models.account_permission import AccountPermission
from checkbook.models.enums import PermissionLevel
from checkbook.repositories.base import BaseRepository

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class AccountPermissionRepository(BaseRepository[AccountPermission]):
    """
    Repository for AccountPermission model database operations.

    Uniqueness of (account_id, user_id) is enforced by the database; writers
    that may race use ``upsert`` so the last writer wins.

    Usage:
        permission_repo = AccountPermissionRepository(session)
        level = await permission_repo.get_level(account.id, user.id)
    """

    def __init__(self, session: AsyncSession):
        super().__init__(AccountPermission, session)

    async def get(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> AccountPermission | None:
        """
        Get the grant a user holds on an account.

        Returns:
            AccountPermission instance, or None if the user holds no grant
        """
        result = await self.session.execute(
            select(AccountPermission).where(
                AccountPermission.account_id == account_id,
                AccountPermission.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_level(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> PermissionLevel | None:
        result = await self.session.execute(
            select(AccountPermission.permission_level).where(
                AccountPermission.account_id == account_id,
                AccountPermission.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, instance: AccountPermission) -> AccountPermission:
        """
        Insert a new grant.

        Runs inside a savepoint so a duplicate leaves the session usable.

        Raises:
            DuplicateGrantError: If the user already holds a grant on the account
        """
        try:
            async with self.session.begin_nested():
                self.session.add(instance)
        except IntegrityError as e:
            raise DuplicateGrantError(
                details={
                    "account_id": str(instance.account_id),
                    "user_id": str(instance.user_id),
                }
            ) from e
        await self.session.refresh(instance)
        return instance

    async def upsert(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        permission_level: PermissionLevel,
        created_by: uuid.UUID | None = None,
    ) -> AccountPermission:
        """
        Insert a grant, or overwrite the level of the existing one.

        A single INSERT ... ON CONFLICT DO UPDATE statement, so concurrent
        upserts on the same pair serialise in the database and the result is
        exactly one row holding the last written level.

        Returns:
            The stored grant, freshly loaded
        """
        dialect = self.session.get_bind().dialect.name
        try:
            insert = _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise NotImplementedError(f"Grant upsert is not supported on {dialect}")

        now = datetime.now(UTC)
        stmt = insert(AccountPermission).values(
            id=uuid.uuid4(),
            account_id=account_id,
            user_id=user_id,
            permission_level=permission_level,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["account_id", "user_id"],
            set_={
                "permission_level": stmt.excluded.permission_level,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        await self.session.execute(stmt)

        result = await self.session.execute(
            select(AccountPermission)
            .where(
                AccountPermission.account_id == account_id,
                AccountPermission.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def remove(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> bool:
        """
        Delete a grant.

        Returns:
            True if a grant was deleted, False if none existed
        """
        result = await self.session.execute(
            delete(AccountPermission).where(
                AccountPermission.account_id == account_id,
                AccountPermission.user_id == user_id,
            )
        )
        return result.rowcount > 0

    async def remove_all_for_account(self, account_id: uuid.UUID) -> int:
        result = await self.session.execute(
            delete(AccountPermission).where(AccountPermission.account_id == account_id)
        )
        return result.rowcount

    async def list_for_account(self, account_id: uuid.UUID) -> list[AccountPermission]:
        """All grants on an account, newest first."""
        result = await self.session.execute(
            select(AccountPermission)
            .where(AccountPermission.account_id == account_id)
            .order_by(AccountPermission.created_at.desc(), AccountPermission.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_user(self, user_id: uuid.UUID) -> list[AccountPermission]:
        """All grants held by a user, newest first."""
        result = await self.session.execute(
            select(AccountPermission)
            .where(AccountPermission.user_id == user_id)
            .order_by(AccountPermission.created_at.desc(), AccountPermission.id.desc())
        )
        return list(result.scalars().all())

    async def count_for_account(self, account_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(AccountPermission)
            .where(AccountPermission.account_id == account_id)
        )
        return result.scalar_one()

"""
Account repository for database operations.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.models.account import Account
from checkbook.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """
    Repository for Account model database operations.

    Usage:
        account_repo = AccountRepository(session)
        accounts = await account_repo.get_by_owner(user.id)
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Account, session)

    async def get_by_owner(self, owner_id: uuid.UUID) -> list[Account]:
        """Accounts owned by a user, newest first."""
        result = await self.session.execute(
            select(Account)
            .where(Account.user_id == owner_id)
            .order_by(Account.created_at.desc(), Account.id.desc())
        )
        return list(result.scalars().all())

    async def get_ids_by_owner(self, owner_id: uuid.UUID) -> list[uuid.UUID]:
        result = await self.session.execute(
            select(Account.id).where(Account.user_id == owner_id)
        )
        return list(result.scalars().all())

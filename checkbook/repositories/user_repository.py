"""
User repository for database operations.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.models.user import User
from checkbook.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_username(self, username: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_username_or_email(self, identifier: str) -> User | None:
        result = await self.session.execute(
            select(User).where(
                or_(User.username == identifier, User.email == identifier)
            )
        )
        return result.scalars().first()

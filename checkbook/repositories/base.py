"""
Base repository with generic CRUD operations.

All specific repositories should inherit from BaseRepository.

Type Parameters:
    ModelType: The SQLAlchemy model class (e.g., Account, User)
"""

import uuid
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository for database operations.

    Repositories flush but never commit; the calling service owns the
    transaction boundary.

    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession):
                super().__init__(User, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def add(self, instance: ModelType) -> ModelType:
        """
        Persist a model instance.

        Returns:
            Persisted model instance (with ID and timestamps populated)
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: uuid.UUID) -> ModelType | None:
        """
        Get a record by ID.

        Example:
            account = await account_repo.get_by_id(account_id)
            if account is None:
                raise NotFoundError("Account")
        """
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def update(self, instance: ModelType) -> ModelType:
        """
        Persist changes to an already-modified model instance.

        The caller modifies attributes first; this only flushes and refreshes.
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Hard delete a record."""
        await self.session.delete(instance)
        await self.session.flush()

    async def count(self) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(self.model)
        )
        return result.scalar_one()

    async def exists(self, id: uuid.UUID) -> bool:
        return await self.get_by_id(id) is not None

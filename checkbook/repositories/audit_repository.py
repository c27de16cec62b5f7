"""
AuditLog repository for audit trail operations.

Note: AuditLogs are IMMUTABLE - this repository supports creation, reading
and the retention sweep only. There is no update path.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.models.audit_log import AuditLog
from checkbook.models.enums import AuditAction


class AuditLogRepository:
    """
    Repository for AuditLog model operations.

    This repository does NOT extend BaseRepository because audit logs are
    immutable.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, instance: AuditLog) -> AuditLog:
        """
        Persist a new audit log entry inside a SAVEPOINT.

        A failed write rolls back the savepoint only and the error propagates;
        the enclosing transaction stays usable.
        """
        async with self.session.begin_nested():
            self.session.add(instance)
        await self.session.refresh(instance)
        return instance

    @staticmethod
    def _filtered(
        query: Select[Any],
        account_id: uuid.UUID | None,
        action_type: AuditAction | None,
        user_id: uuid.UUID | None,
        start_date: datetime | None,
        end_date: datetime | None,
    ) -> Select[Any]:
        if account_id is not None:
            query = query.where(AuditLog.account_id == account_id)
        if action_type is not None:
            query = query.where(AuditLog.action_type == action_type)
        if user_id is not None:
            query = query.where(AuditLog.user_id == user_id)
        if start_date is not None:
            query = query.where(AuditLog.created_at >= start_date)
        if end_date is not None:
            query = query.where(AuditLog.created_at <= end_date)
        return query

    async def search(
        self,
        account_id: uuid.UUID | None = None,
        action_type: AuditAction | None = None,
        user_id: uuid.UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[AuditLog], int]:
        """
        Filtered page of audit logs, newest first.

        Example:
            logs, total = await audit_repo.search(
                account_id=account.id,
                action_type=AuditAction.PERMISSION_GRANTED,
            )

        Returns:
            Tuple of (logs for the page, total matching logs)
        """
        filters = (account_id, action_type, user_id, start_date, end_date)

        query = self._filtered(select(AuditLog), *filters)
        query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        result = await self.session.execute(query.offset(offset).limit(limit))
        logs = list(result.scalars().all())

        count_query = self._filtered(select(func.count(AuditLog.id)), *filters)
        total = (await self.session.execute(count_query)).scalar_one()

        return logs, total

    async def get_recent(self, account_id: uuid.UUID, limit: int = 10) -> list[AuditLog]:
        result = await self.session.execute(
            select(AuditLog)
            .where(AuditLog.account_id == account_id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_in_range(
        self,
        account_id: uuid.UUID,
        start_date: datetime,
        end_date: datetime,
    ) -> int:
        query = self._filtered(
            select(func.count(AuditLog.id)), account_id, None, None, start_date, end_date
        )
        return (await self.session.execute(query)).scalar_one()

    async def delete_older_than(self, cutoff: datetime) -> int:
        """
        Retention sweep: delete entries created before the cutoff.

        Returns:
            Number of deleted entries
        """
        result = await self.session.execute(
            delete(AuditLog).where(AuditLog.created_at < cutoff)
        )
        return result.rowcount

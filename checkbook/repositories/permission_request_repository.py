"""
PermissionRequest repository for database operations.

This module provides:
- Pending-request lookups and insertion guarded by the single-pending index
- Guarded status transitions (compare-and-set on PENDING)
- Filtered, paginated listings with a stable newest-first order
- Retention cleanup of processed requests
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.exceptions import DuplicateRequestError
from checkbook.models.account import Account
from checkbook.models.enums import RequestStatus
from checkbook.models.permission_request import PermissionRequest
from checkbook.repositories.base import BaseRepository


@dataclass
class PermissionRequestFilter:
    """Optional filters for request listings. Unset fields are ignored."""

    account_id: uuid.UUID | None = None
    owner_id: uuid.UUID | None = None
    requester_id: uuid.UUID | None = None
    reviewer_id: uuid.UUID | None = None
    status: RequestStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class PermissionRequestRepository(BaseRepository[PermissionRequest]):
    """Repository for PermissionRequest model database operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(PermissionRequest, session)

    async def get_pending(
        self,
        account_id: uuid.UUID,
        requester_id: uuid.UUID,
    ) -> PermissionRequest | None:
        """The requester's PENDING request on the account, if any."""
        result = await self.session.execute(
            select(PermissionRequest).where(
                PermissionRequest.account_id == account_id,
                PermissionRequest.requester_id == requester_id,
                PermissionRequest.status == RequestStatus.PENDING,
            )
        )
        return result.scalar_one_or_none()

    async def add_pending(self, instance: PermissionRequest) -> PermissionRequest:
        """
        Insert a new PENDING request.

        The partial unique index rejects a second PENDING request for the same
        (account, requester) even when two creates race past the service check.

        Raises:
            DuplicateRequestError: If a PENDING request already exists
        """
        try:
            async with self.session.begin_nested():
                self.session.add(instance)
        except IntegrityError as e:
            raise DuplicateRequestError(
                details={"account_id": str(instance.account_id)}
            ) from e
        await self.session.refresh(instance)
        return instance

    async def transition_from_pending(
        self,
        request_id: uuid.UUID,
        new_status: RequestStatus,
        reviewed_at: datetime,
        reviewed_by: uuid.UUID | None = None,
        review_message: str | None = None,
    ) -> bool:
        """
        Move a request out of PENDING.

        Single guarded UPDATE: it only matches while the row is still PENDING,
        so of two concurrent transitions exactly one succeeds.

        Returns:
            True if this call performed the transition
        """
        values: dict[str, Any] = {
            "status": new_status,
            "reviewed_at": reviewed_at,
        }
        if reviewed_by is not None:
            values["reviewed_by"] = reviewed_by
        if review_message is not None:
            values["review_message"] = review_message

        result = await self.session.execute(
            update(PermissionRequest)
            .where(
                PermissionRequest.id == request_id,
                PermissionRequest.status == RequestStatus.PENDING,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def reload(self, instance: PermissionRequest) -> PermissionRequest:
        await self.session.refresh(instance)
        return instance

    def _apply_filters(self, query: Select[Any], filters: PermissionRequestFilter) -> Select[Any]:
        if filters.owner_id is not None:
            query = query.join(Account, Account.id == PermissionRequest.account_id).where(
                Account.user_id == filters.owner_id
            )
        if filters.account_id is not None:
            query = query.where(PermissionRequest.account_id == filters.account_id)
        if filters.requester_id is not None:
            query = query.where(PermissionRequest.requester_id == filters.requester_id)
        if filters.reviewer_id is not None:
            query = query.where(PermissionRequest.reviewed_by == filters.reviewer_id)
        if filters.status is not None:
            query = query.where(PermissionRequest.status == filters.status)
        if filters.start_date is not None:
            query = query.where(PermissionRequest.created_at >= filters.start_date)
        if filters.end_date is not None:
            query = query.where(PermissionRequest.created_at <= filters.end_date)
        return query

    async def search(
        self,
        filters: PermissionRequestFilter,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[PermissionRequest], int]:
        """
        Filtered page of requests, newest first.

        Returns:
            Tuple of (requests for the page, total matching requests)
        """
        query = self._apply_filters(select(PermissionRequest), filters)
        query = query.order_by(
            PermissionRequest.created_at.desc(), PermissionRequest.id.desc()
        )
        result = await self.session.execute(query.offset(offset).limit(limit))
        items = list(result.scalars().all())

        count_query = self._apply_filters(
            select(func.count(PermissionRequest.id)), filters
        )
        total = (await self.session.execute(count_query)).scalar_one()

        return items, total

    async def count(self, filters: PermissionRequestFilter | None = None) -> int:
        query = select(func.count(PermissionRequest.id))
        if filters is not None:
            query = self._apply_filters(query, filters)
        return (await self.session.execute(query)).scalar_one()

    async def delete_processed_before(self, cutoff: datetime) -> int:
        """
        Delete terminal requests created before the cutoff.

        PENDING requests are never touched.

        Returns:
            Number of deleted requests
        """
        result = await self.session.execute(
            delete(PermissionRequest).where(
                PermissionRequest.status.in_(RequestStatus.terminal_states()),
                PermissionRequest.created_at < cutoff,
            )
        )
        return result.rowcount

"""
Audit service for the account audit trail.

This module provides:
- The audit writer (append), which never fails the business operation
- Typed helpers for every permission and account action
- Audit log retrieval for users with access to the account
- The retention sweep
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import TypeAdapter
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.config import settings
from checkbook.core.exceptions import AuditWriteDegradedError
from checkbook.models.audit_log import AuditLog
from checkbook.models.enums import AuditAction, PermissionLevel
from checkbook.repositories.audit_repository import AuditLogRepository
from checkbook.schemas.common import SearchResult
from checkbook.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

_DETAILS_ADAPTER = TypeAdapter(dict[str, Any])


@dataclass
class AuditWriteResult:
    """
    Outcome of an audit append.

    Attributes:
        entry: The stored entry, or None if the store rejected the write
        degraded: Set when the entry lost its payload or was not stored
    """

    entry: AuditLog | None
    degraded: AuditWriteDegradedError | None = None

    @property
    def ok(self) -> bool:
        return self.degraded is None


class AuditService:
    """
    Service class for audit logging operations.

    Entries are written inside a SAVEPOINT of the caller's transaction, so
    they commit together with the business mutation. A failed audit write
    rolls back only its savepoint and is reported, never raised.

    All audit logs are immutable. The only deletion path is purge_older_than().
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit_repo = AuditLogRepository(session)
        self.permission_service = PermissionService(session)

    @staticmethod
    def serialize_details(details: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """
        Normalise an action payload to JSON-compatible data.

        UUIDs, datetimes, enums and decimals become strings.

        Raises:
            ValueError: If a value has no JSON representation
        """
        if details is None:
            return None
        return _DETAILS_ADAPTER.dump_python(dict(details), mode="json")

    async def append(
        self,
        account_id: uuid.UUID,
        user_id: uuid.UUID,
        action_type: AuditAction,
        details: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        """
        Append one audit entry.

        If the payload cannot be serialised, a degraded entry (action, actor,
        account, no payload) is still written. If the store rejects the write,
        the failure is logged at ERROR level and reported in the result.

        Args:
            account_id: Account the action concerned
            user_id: User who performed the action
            action_type: Type of action performed
            details: Action payload
            ip_address: Client IP address
            user_agent: Client user agent

        Returns:
            AuditWriteResult describing what was stored

        Example:
            result = await audit_service.append(
                account_id=account.id,
                user_id=owner.id,
                action_type=AuditAction.PERMISSION_REVOKED,
                details={"target_user_id": target.id},
                ip_address="192.168.1.1",
            )
        """
        degraded: AuditWriteDegradedError | None = None
        try:
            payload = self.serialize_details(details)
        except (TypeError, ValueError) as e:
            logger.error(
                f"Audit payload for {action_type.value} on account {account_id} "
                f"could not be serialised, writing degraded entry: {e}"
            )
            payload = None
            degraded = AuditWriteDegradedError(
                AuditWriteDegradedError.SERIALIZATION_FAILED,
                details={"error": str(e)},
            )

        entry = AuditLog(
            account_id=account_id,
            user_id=user_id,
            action_type=action_type,
            action_details=payload,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        try:
            entry = await self.audit_repo.add(entry)
        except SQLAlchemyError as e:
            logger.error(
                f"Audit write failed: account={account_id}, user={user_id}, "
                f"action={action_type.value}: {e}",
                exc_info=True,
            )
            return AuditWriteResult(
                entry=None,
                degraded=AuditWriteDegradedError(
                    AuditWriteDegradedError.WRITE_FAILED,
                    details={"error": str(e)},
                ),
            )

        logger.debug(
            f"Audit log created: account={account_id}, user={user_id}, "
            f"action={action_type.value}"
        )
        return AuditWriteResult(entry=entry, degraded=degraded)

    # -------------------------------------------------------------------------
    # Permission management
    # -------------------------------------------------------------------------

    async def log_permission_granted(
        self,
        account_id: uuid.UUID,
        granting_user_id: uuid.UUID,
        target_user_id: uuid.UUID,
        permission_level: PermissionLevel,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "granting_user_id": granting_user_id,
            "target_user_id": target_user_id,
            "permission_level": permission_level,
            **(extra or {}),
        }
        return await self.append(
            account_id, granting_user_id, AuditAction.PERMISSION_GRANTED,
            details, ip_address, user_agent,
        )

    async def log_permission_modified(
        self,
        account_id: uuid.UUID,
        modifying_user_id: uuid.UUID,
        target_user_id: uuid.UUID,
        old_permission_level: PermissionLevel,
        new_permission_level: PermissionLevel,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "modifying_user_id": modifying_user_id,
            "target_user_id": target_user_id,
            "old_permission_level": old_permission_level,
            "new_permission_level": new_permission_level,
            **(extra or {}),
        }
        return await self.append(
            account_id, modifying_user_id, AuditAction.PERMISSION_MODIFIED,
            details, ip_address, user_agent,
        )

    async def log_permission_revoked(
        self,
        account_id: uuid.UUID,
        revoking_user_id: uuid.UUID,
        target_user_id: uuid.UUID,
        permission_level: PermissionLevel,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "revoking_user_id": revoking_user_id,
            "target_user_id": target_user_id,
            "permission_level": permission_level,
            **(extra or {}),
        }
        return await self.append(
            account_id, revoking_user_id, AuditAction.PERMISSION_REVOKED,
            details, ip_address, user_agent,
        )

    # -------------------------------------------------------------------------
    # Permission request workflow
    # -------------------------------------------------------------------------

    async def log_permission_requested(
        self,
        account_id: uuid.UUID,
        requesting_user_id: uuid.UUID,
        requested_permission: PermissionLevel,
        current_permission: PermissionLevel | None,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "requesting_user_id": requesting_user_id,
            "requested_permission": requested_permission,
            "current_permission": current_permission,
            **(extra or {}),
        }
        return await self.append(
            account_id, requesting_user_id, AuditAction.PERMISSION_REQUESTED,
            details, ip_address, user_agent,
        )

    async def log_request_approved(
        self,
        account_id: uuid.UUID,
        approving_user_id: uuid.UUID,
        requesting_user_id: uuid.UUID,
        old_permission_level: PermissionLevel | None,
        new_permission_level: PermissionLevel,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "approving_user_id": approving_user_id,
            "requesting_user_id": requesting_user_id,
            "old_permission_level": old_permission_level,
            "new_permission_level": new_permission_level,
            **(extra or {}),
        }
        return await self.append(
            account_id, approving_user_id, AuditAction.PERMISSION_REQUEST_APPROVED,
            details, ip_address, user_agent,
        )

    async def log_request_denied(
        self,
        account_id: uuid.UUID,
        denying_user_id: uuid.UUID,
        requesting_user_id: uuid.UUID,
        permission_level: PermissionLevel,
        reason: str | None = None,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "denying_user_id": denying_user_id,
            "requesting_user_id": requesting_user_id,
            "permission_level": permission_level,
            "reason": reason,
            **(extra or {}),
        }
        return await self.append(
            account_id, denying_user_id, AuditAction.PERMISSION_REQUEST_DENIED,
            details, ip_address, user_agent,
        )

    async def log_request_cancelled(
        self,
        account_id: uuid.UUID,
        requesting_user_id: uuid.UUID,
        permission_level: PermissionLevel,
        extra: Mapping[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {
            "requesting_user_id": requesting_user_id,
            "permission_level": permission_level,
            **(extra or {}),
        }
        return await self.append(
            account_id, requesting_user_id, AuditAction.PERMISSION_REQUEST_CANCELLED,
            details, ip_address, user_agent,
        )

    # -------------------------------------------------------------------------
    # Account and transaction activity (recorded for collaborator services)
    # -------------------------------------------------------------------------

    async def log_account_viewed(
        self,
        account_id: uuid.UUID,
        viewing_user_id: uuid.UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        return await self.append(
            account_id, viewing_user_id, AuditAction.ACCOUNT_VIEWED,
            {"viewing_user_id": viewing_user_id}, ip_address, user_agent,
        )

    async def log_account_modified(
        self,
        account_id: uuid.UUID,
        modifying_user_id: uuid.UUID,
        changes: Mapping[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {"modifying_user_id": modifying_user_id, **changes}
        return await self.append(
            account_id, modifying_user_id, AuditAction.ACCOUNT_MODIFIED,
            details, ip_address, user_agent,
        )

    async def log_transaction_added(
        self,
        account_id: uuid.UUID,
        adding_user_id: uuid.UUID,
        transaction_details: Mapping[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {"adding_user_id": adding_user_id, **transaction_details}
        return await self.append(
            account_id, adding_user_id, AuditAction.TRANSACTION_ADDED,
            details, ip_address, user_agent,
        )

    async def log_transaction_modified(
        self,
        account_id: uuid.UUID,
        modifying_user_id: uuid.UUID,
        transaction_details: Mapping[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {"modifying_user_id": modifying_user_id, **transaction_details}
        return await self.append(
            account_id, modifying_user_id, AuditAction.TRANSACTION_MODIFIED,
            details, ip_address, user_agent,
        )

    async def log_transaction_deleted(
        self,
        account_id: uuid.UUID,
        deleting_user_id: uuid.UUID,
        transaction_details: Mapping[str, Any],
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditWriteResult:
        details = {"deleting_user_id": deleting_user_id, **transaction_details}
        return await self.append(
            account_id, deleting_user_id, AuditAction.TRANSACTION_DELETED,
            details, ip_address, user_agent,
        )

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    async def get_account_audit_logs(
        self,
        account_id: uuid.UUID,
        current_user_id: uuid.UUID,
        action_type: AuditAction | None = None,
        actor_user_id: uuid.UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> SearchResult[AuditLog]:
        """
        Audit trail of an account, newest first.

        Any user with access to the account may read its trail.

        Raises:
            AccountNotAccessibleError: If the account is missing or the
                caller has no access
        """
        await self.permission_service.require_access(account_id, current_user_id)

        logs, total = await self.audit_repo.search(
            account_id=account_id,
            action_type=action_type,
            user_id=actor_user_id,
            start_date=start_date,
            end_date=end_date,
            offset=offset,
            limit=limit,
        )
        return SearchResult(items=logs, total=total)

    async def get_recent_audit_logs(
        self,
        account_id: uuid.UUID,
        limit: int = 10,
    ) -> list[AuditLog]:
        return await self.audit_repo.get_recent(account_id, limit)

    async def count_audit_logs_in_range(
        self,
        account_id: uuid.UUID,
        start_date: datetime,
        end_date: datetime,
    ) -> int:
        return await self.audit_repo.count_in_range(account_id, start_date, end_date)

    # -------------------------------------------------------------------------
    # Retention
    # -------------------------------------------------------------------------

    async def purge_older_than(self, cutoff: datetime) -> int:
        """
        Delete audit entries created before the cutoff and commit.

        Returns:
            Number of purged entries
        """
        deleted = await self.audit_repo.delete_older_than(cutoff)
        await self.session.commit()
        logger.info(f"Purged {deleted} audit log entries older than {cutoff.isoformat()}")
        return deleted

    async def purge_expired(self) -> int:
        """Apply the configured retention period (audit_log_retention_days)."""
        cutoff = datetime.now(UTC) - timedelta(days=settings.audit_log_retention_days)
        return await self.purge_older_than(cutoff)

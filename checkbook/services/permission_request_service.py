"""
Permission request workflow.

A user with access to a shared account asks the owner for a higher level:

    PENDING ──approve (owner)──> APPROVED   (grant upserted to the requested level)
        │───deny (owner)───────> DENIED
        └───cancel (requester)─> CANCELLED

Terminal states never change. Every transition is a guarded UPDATE on
status = 'PENDING', so of two concurrent transitions of one request exactly
one wins and the other observes InvalidStateError.
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from checkbook.core.config import settings
from checkbook.core.exceptions import (
    AccountNotAccessibleError,
    DuplicateRequestError,
    ForbiddenError,
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
)
from checkbook.models.enums import PermissionLevel, RequestStatus
from checkbook.models.permission_request import PermissionRequest
from checkbook.repositories.account_permission_repository import (
    AccountPermissionRepository,
)
from checkbook.repositories.permission_request_repository import (
    PermissionRequestFilter,
    PermissionRequestRepository,
)
from checkbook.schemas.common import SearchResult
from checkbook.services.audit_service import AuditService
from checkbook.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

REVIEW_FORBIDDEN = "Only the account owner can review permission requests"


class PermissionRequestService:
    """Service implementing the permission request state machine and its read models."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.request_repo = PermissionRequestRepository(session)
        self.permission_repo = AccountPermissionRepository(session)
        self.permission_service = PermissionService(session)
        self.audit_service = AuditService(session)

    async def _get_request(self, request_id: uuid.UUID) -> PermissionRequest:
        request = await self.request_repo.get_by_id(request_id)
        if request is None:
            raise NotFoundError("Permission request")
        return request

    @staticmethod
    def _require_pending(request: PermissionRequest) -> None:
        if not request.is_pending:
            raise InvalidStateError(
                f"Request is not pending (status: {request.status.value})",
                details={"request_id": str(request.id), "status": request.status.value},
            )

    async def _transition(
        self,
        request: PermissionRequest,
        new_status: RequestStatus,
        reviewed_by: uuid.UUID | None = None,
        review_message: str | None = None,
    ) -> PermissionRequest:
        applied = await self.request_repo.transition_from_pending(
            request.id,
            new_status,
            reviewed_at=datetime.now(UTC),
            reviewed_by=reviewed_by,
            review_message=review_message,
        )
        request = await self.request_repo.reload(request)
        if not applied:
            # Lost a race with another transition of the same request
            raise InvalidStateError(
                f"Request is not pending (status: {request.status.value})",
                details={"request_id": str(request.id), "status": request.status.value},
            )
        return request

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def create_request(
        self,
        account_id: uuid.UUID,
        requester_id: uuid.UUID,
        requested_permission: PermissionLevel,
        request_message: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> PermissionRequest:
        """
        Ask the account owner for a permission level.

        Args:
            account_id: Account the requester already has access to
            requester_id: User making the request
            requested_permission: Level asked for
            request_message: Optional note for the owner
            ip_address: Client IP address for audit logging
            user_agent: Client user agent for audit logging

        Returns:
            The new PENDING request, with current_permission snapshotted

        Raises:
            AccountNotAccessibleError: Account missing or requester has no access
            InvalidRequestError: Requester is the owner, or already holds
                the requested level or higher
            DuplicateRequestError: Requester already has a PENDING request
        """
        current = await self.permission_service.get_effective_permission(
            account_id, requester_id
        )
        if current is None:
            raise AccountNotAccessibleError()

        if await self.permission_service.is_owner(account_id, requester_id):
            raise InvalidRequestError(
                "Account owners cannot request permissions on their own account"
            )

        if await self.request_repo.get_pending(account_id, requester_id) is not None:
            raise DuplicateRequestError()

        if current.includes(requested_permission):
            raise InvalidRequestError(
                "You already have this permission level or higher",
                details={
                    "current": current.value,
                    "requested": requested_permission.value,
                },
            )

        request = await self.request_repo.add_pending(
            PermissionRequest(
                account_id=account_id,
                requester_id=requester_id,
                requested_permission=requested_permission,
                current_permission=current,
                request_message=request_message,
                status=RequestStatus.PENDING,
            )
        )

        await self.audit_service.log_permission_requested(
            account_id, requester_id, requested_permission, current,
            extra={"request_id": request.id, "request_message": request_message},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(
            f"User {requester_id} requested {requested_permission.value} on account "
            f"{account_id} (request {request.id})"
        )
        return request

    async def approve_request(
        self,
        request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        review_message: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> PermissionRequest:
        """
        Approve a pending request and grant the requested level.

        The status change and the grant upsert commit together or not at all.
        The requester must still hold a grant on the account: a request whose
        requester was revoked in the meantime cannot be approved.

        Raises:
            NotFoundError: Request not found
            AccountNotAccessibleError: Reviewer has no access to the account
            ForbiddenError: Reviewer is not the account owner
            InvalidStateError: Request is not PENDING, or the requester no
                longer holds a grant
        """
        request = await self._get_request(request_id)
        await self.permission_service.require_owner(
            request.account_id, reviewer_id, message=REVIEW_FORBIDDEN
        )
        self._require_pending(request)

        old_level = await self.permission_repo.get_level(
            request.account_id, request.requester_id
        )
        if old_level is None:
            raise InvalidStateError(
                "Requester no longer has access to this account",
                details={"request_id": str(request.id)},
            )

        try:
            request = await self._transition(
                request, RequestStatus.APPROVED, reviewer_id, review_message
            )
            await self.permission_repo.upsert(
                account_id=request.account_id,
                user_id=request.requester_id,
                permission_level=request.requested_permission,
                created_by=reviewer_id,
            )
        except Exception:
            await self.session.rollback()
            raise

        await self.audit_service.log_request_approved(
            request.account_id, reviewer_id, request.requester_id,
            old_level, request.requested_permission,
            extra={"request_id": request.id, "review_message": review_message},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(
            f"User {reviewer_id} approved request {request.id}: user "
            f"{request.requester_id} now has {request.requested_permission.value} "
            f"on account {request.account_id}"
        )
        return request

    async def deny_request(
        self,
        request_id: uuid.UUID,
        reviewer_id: uuid.UUID,
        review_message: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> PermissionRequest:
        """
        Deny a pending request. Grants are not touched.

        Raises:
            NotFoundError: Request not found
            AccountNotAccessibleError: Reviewer has no access to the account
            ForbiddenError: Reviewer is not the account owner
            InvalidStateError: Request is not PENDING
        """
        request = await self._get_request(request_id)
        await self.permission_service.require_owner(
            request.account_id, reviewer_id, message=REVIEW_FORBIDDEN
        )
        self._require_pending(request)

        request = await self._transition(
            request, RequestStatus.DENIED, reviewer_id, review_message
        )

        await self.audit_service.log_request_denied(
            request.account_id, reviewer_id, request.requester_id,
            request.requested_permission, reason=review_message,
            extra={"request_id": request.id},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(f"User {reviewer_id} denied request {request.id}")
        return request

    async def cancel_request(
        self,
        request_id: uuid.UUID,
        requester_id: uuid.UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> PermissionRequest:
        """
        Withdraw a pending request.

        Raises:
            NotFoundError: Request not found, or caller has no access to the account
            ForbiddenError: Caller can see the account but is not the requester
            InvalidStateError: Request is not PENDING
        """
        request = await self._get_request(request_id)
        if request.requester_id != requester_id:
            if not await self.permission_service.has_any_access(
                request.account_id, requester_id
            ):
                raise NotFoundError("Permission request")
            raise ForbiddenError("You can only cancel your own permission requests")
        self._require_pending(request)

        request = await self._transition(request, RequestStatus.CANCELLED)

        await self.audit_service.log_request_cancelled(
            request.account_id, requester_id, request.requested_permission,
            extra={"request_id": request.id},
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()

        logger.info(f"User {requester_id} cancelled request {request.id}")
        return request

    # -------------------------------------------------------------------------
    # Read models
    # -------------------------------------------------------------------------

    async def get_request(
        self,
        request_id: uuid.UUID,
        current_user_id: uuid.UUID,
    ) -> PermissionRequest:
        """
        A single request, visible to its requester and the account owner.

        Raises:
            NotFoundError: Request not found, or caller is neither party
        """
        request = await self._get_request(request_id)
        if request.requester_id == current_user_id:
            return request
        if await self.permission_service.is_owner(request.account_id, current_user_id):
            return request
        raise NotFoundError("Permission request")

    async def list_account_requests(
        self,
        account_id: uuid.UUID,
        current_user_id: uuid.UUID,
        status: RequestStatus | None = None,
        requester_id: uuid.UUID | None = None,
        reviewer_id: uuid.UUID | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> SearchResult[PermissionRequest]:
        """
        Requests on one account, filtered, newest first. Owner only.

        Raises:
            AccountNotAccessibleError: Account missing or caller has no access
            ForbiddenError: Caller is not the owner
        """
        await self.permission_service.require_owner(
            account_id, current_user_id, message=REVIEW_FORBIDDEN
        )
        items, total = await self.request_repo.search(
            PermissionRequestFilter(
                account_id=account_id,
                status=status,
                requester_id=requester_id,
                reviewer_id=reviewer_id,
                start_date=start_date,
                end_date=end_date,
            ),
            offset=offset,
            limit=limit,
        )
        return SearchResult(items=items, total=total)

    async def list_user_requests(
        self,
        requester_id: uuid.UUID,
        status: RequestStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> SearchResult[PermissionRequest]:
        """Requests made by the user, newest first."""
        items, total = await self.request_repo.search(
            PermissionRequestFilter(requester_id=requester_id, status=status),
            offset=offset,
            limit=limit,
        )
        return SearchResult(items=items, total=total)

    async def list_owner_requests(
        self,
        owner_id: uuid.UUID,
        status: RequestStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> SearchResult[PermissionRequest]:
        """Requests on any account the user owns, newest first."""
        items, total = await self.request_repo.search(
            PermissionRequestFilter(owner_id=owner_id, status=status),
            offset=offset,
            limit=limit,
        )
        return SearchResult(items=items, total=total)

    async def list_pending_for_owner(
        self,
        owner_id: uuid.UUID,
        offset: int = 0,
        limit: int = 20,
    ) -> SearchResult[PermissionRequest]:
        return await self.list_owner_requests(
            owner_id, status=RequestStatus.PENDING, offset=offset, limit=limit
        )

    async def count_pending_for_owner(self, owner_id: uuid.UUID) -> int:
        return await self.request_repo.count(
            PermissionRequestFilter(owner_id=owner_id, status=RequestStatus.PENDING)
        )

    # -------------------------------------------------------------------------
    # Retention
    # -------------------------------------------------------------------------

    async def cleanup_processed_requests(self, cutoff: datetime) -> int:
        """
        Delete APPROVED, DENIED and CANCELLED requests created before the cutoff.

        PENDING requests are never deleted.

        Returns:
            Number of deleted requests
        """
        deleted = await self.request_repo.delete_processed_before(cutoff)
        await self.session.commit()
        logger.info(
            f"Cleaned up {deleted} processed permission requests older than "
            f"{cutoff.isoformat()}"
        )
        return deleted

    async def cleanup_expired_requests(self) -> int:
        """Apply the configured retention (permission_request_retention_days)."""
        cutoff = datetime.now(UTC) - timedelta(
            days=settings.permission_request_retention_days
        )
        return await self.cleanup_processed_requests(cutoff)

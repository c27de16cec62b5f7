"""
Permission request API routes.

This module provides endpoints for:
- POST /api/v1/permission-requests - Ask an owner for a permission level
- GET /api/v1/permission-requests/my-requests - Requests made by the caller
- GET /api/v1/permission-requests/pending - Pending requests on the caller's accounts
- GET /api/v1/permission-requests/pending/count - Number of those
- GET /api/v1/permission-requests/for-my-accounts - All requests on the caller's accounts
- GET /api/v1/permission-requests/account/{account_id} - Filtered requests of one account
- GET /api/v1/permission-requests/{request_id} - Single request
- PUT /api/v1/permission-requests/{request_id}/approve - Approve
- PUT /api/v1/permission-requests/{request_id}/deny - Deny
- PUT /api/v1/permission-requests/{request_id}/cancel - Cancel
"""

import uuid

from fastapi import APIRouter, Depends, Query, status

from checkbook.api.dependencies import (
    Client,
    CurrentUser,
    PermissionRequestServiceDep,
)
from checkbook.models.enums import RequestStatus
from checkbook.models.permission_request import PermissionRequest
from checkbook.schemas.common import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    SearchResult,
)
from checkbook.schemas.permission_request import (
    PendingCountResponse,
    PermissionRequestCreate,
    PermissionRequestFilterParams,
    PermissionRequestResponse,
    PermissionRequestReview,
)

router = APIRouter(prefix="/permission-requests", tags=["Permission Requests"])


def _page(
    result: SearchResult[PermissionRequest],
    pagination: PaginationParams,
) -> PaginatedResponse[PermissionRequestResponse]:
    return PaginatedResponse(
        data=[PermissionRequestResponse.model_validate(r) for r in result.items],
        meta=PaginationMeta.build(result.total, pagination),
    )


@router.post(
    "",
    response_model=PermissionRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a permission level",
    description="""
    Ask the owner of a shared account for a higher permission level.

    **Permission Required:** any access, not the owner

    **Validation:**
    - Only one pending request per account and requester
    - The requested level must be above the current one

    **Audit:** Creates PERMISSION_REQUESTED entry
    """,
)
async def create_request(
    request_data: PermissionRequestCreate,
    current_user: CurrentUser,
    client: Client,
    request_service: PermissionRequestServiceDep,
) -> PermissionRequestResponse:
    permission_request = await request_service.create_request(
        account_id=request_data.account_id,
        requester_id=current_user.id,
        requested_permission=request_data.requested_permission,
        request_message=request_data.message,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return PermissionRequestResponse.model_validate(permission_request)


@router.get(
    "/my-requests",
    response_model=PaginatedResponse[PermissionRequestResponse],
    summary="List my requests",
)
async def list_my_requests(
    current_user: CurrentUser,
    request_service: PermissionRequestServiceDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[PermissionRequestResponse]:
    result = await request_service.list_user_requests(
        requester_id=current_user.id,
        status=status_filter,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return _page(result, pagination)


@router.get(
    "/pending",
    response_model=PaginatedResponse[PermissionRequestResponse],
    summary="List pending requests on my accounts",
)
async def list_pending_requests(
    current_user: CurrentUser,
    request_service: PermissionRequestServiceDep,
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[PermissionRequestResponse]:
    result = await request_service.list_pending_for_owner(
        owner_id=current_user.id,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return _page(result, pagination)


@router.get(
    "/pending/count",
    response_model=PendingCountResponse,
    summary="Count pending requests on my accounts",
)
async def count_pending_requests(
    current_user: CurrentUser,
    request_service: PermissionRequestServiceDep,
) -> PendingCountResponse:
    pending = await request_service.count_pending_for_owner(current_user.id)
    return PendingCountResponse(pending=pending)


@router.get(
    "/for-my-accounts",
    response_model=PaginatedResponse[PermissionRequestResponse],
    summary="List requests on my accounts",
)
async def list_requests_for_my_accounts(
    current_user: CurrentUser,
    request_service: PermissionRequestServiceDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[PermissionRequestResponse]:
    result = await request_service.list_owner_requests(
        owner_id=current_user.id,
        status=status_filter,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return _page(result, pagination)


@router.get(
    "/account/{account_id}",
    response_model=PaginatedResponse[PermissionRequestResponse],
    summary="List requests of an account",
    description="""
    Requests of one account, newest first, filtered by status, requester,
    reviewer and creation date range.

    **Permission Required:** OWNER
    """,
)
async def list_account_requests(
    account_id: uuid.UUID,
    current_user: CurrentUser,
    request_service: PermissionRequestServiceDep,
    filters: PermissionRequestFilterParams = Depends(),
    pagination: PaginationParams = Depends(),
) -> PaginatedResponse[PermissionRequestResponse]:
    result = await request_service.list_account_requests(
        account_id=account_id,
        current_user_id=current_user.id,
        status=filters.status,
        requester_id=filters.requester_id,
        reviewer_id=filters.reviewer_id,
        start_date=filters.start_date,
        end_date=filters.end_date,
        offset=pagination.offset,
        limit=pagination.page_size,
    )
    return _page(result, pagination)


@router.get(
    "/{request_id}",
    response_model=PermissionRequestResponse,
    summary="Get request",
)
async def get_request(
    request_id: uuid.UUID,
    current_user: CurrentUser,
    request_service: PermissionRequestServiceDep,
) -> PermissionRequestResponse:
    """Visible to the requester and the account owner only."""
    permission_request = await request_service.get_request(request_id, current_user.id)
    return PermissionRequestResponse.model_validate(permission_request)


@router.put(
    "/{request_id}/approve",
    response_model=PermissionRequestResponse,
    summary="Approve request",
    description="""
    Approve a pending request. The requester's grant is set to the requested
    level in the same transaction.

    **Permission Required:** OWNER

    **Audit:** Creates PERMISSION_REQUEST_APPROVED entry
    """,
)
async def approve_request(
    request_id: uuid.UUID,
    current_user: CurrentUser,
    client: Client,
    request_service: PermissionRequestServiceDep,
    review: PermissionRequestReview | None = None,
) -> PermissionRequestResponse:
    permission_request = await request_service.approve_request(
        request_id=request_id,
        reviewer_id=current_user.id,
        review_message=review.message if review else None,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return PermissionRequestResponse.model_validate(permission_request)


@router.put(
    "/{request_id}/deny",
    response_model=PermissionRequestResponse,
    summary="Deny request",
    description="""
    Deny a pending request. Grants are not changed.

    **Permission Required:** OWNER

    **Audit:** Creates PERMISSION_REQUEST_DENIED entry
    """,
)
async def deny_request(
    request_id: uuid.UUID,
    current_user: CurrentUser,
    client: Client,
    request_service: PermissionRequestServiceDep,
    review: PermissionRequestReview | None = None,
) -> PermissionRequestResponse:
    permission_request = await request_service.deny_request(
        request_id=request_id,
        reviewer_id=current_user.id,
        review_message=review.message if review else None,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return PermissionRequestResponse.model_validate(permission_request)


@router.put(
    "/{request_id}/cancel",
    response_model=PermissionRequestResponse,
    summary="Cancel request",
    description="""
    Withdraw a pending request.

    **Permission Required:** the requester

    **Audit:** Creates PERMISSION_REQUEST_CANCELLED entry
    """,
)
async def cancel_request(
    request_id: uuid.UUID,
    current_user: CurrentUser,
    client: Client,
    request_service: PermissionRequestServiceDep,
) -> PermissionRequestResponse:
    permission_request = await request_service.cancel_request(
        request_id=request_id,
        requester_id=current_user.id,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return PermissionRequestResponse.model_validate(permission_request)

"""
Audit log API routes.

This module provides:
- GET /api/v1/accounts/{account_id}/audit-logs - Audit trail of an account
"""

import logging
import uuid

from fastapi import APIRouter, Depends

from checkbook.api.dependencies import AuditServiceDep, CurrentUser
from checkbook.schemas.audit import AuditLogFilterParams, AuditLogResponse
from checkbook.schemas.common import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/accounts", tags=["Audit Logs"])


@router.get(
    "/{account_id}/audit-logs",
    response_model=PaginatedResponse[AuditLogResponse],
    summary="Get account audit logs",
    description="Audit trail of an account, newest first",
)
async def get_account_audit_logs(
    account_id: uuid.UUID,
    current_user: CurrentUser,
    audit_service: AuditServiceDep,
    pagination: PaginationParams = Depends(),
    filters: AuditLogFilterParams = Depends(),
) -> PaginatedResponse[AuditLogResponse]:
    """
    Get audit logs of an account.

    Query parameters:
        - page: Page number (default: 1)
        - page_size: Items per page (default: 20, max: 100)
        - user_id: Filter by acting user
        - action_type: Filter by action type (e.g., "PERMISSION_GRANTED")
        - start_date: Filter logs at or after this date
        - end_date: Filter logs at or before this date

    Returns:
        PaginatedResponse with list of audit logs and pagination metadata

    Requires:
        - Valid access token
        - Any access to the account
    """
    result = await audit_service.get_account_audit_logs(
        account_id=account_id,
        current_user_id=current_user.id,
        action_type=filters.action_type,
        actor_user_id=filters.user_id,
        start_date=filters.start_date,
        end_date=filters.end_date,
        offset=pagination.offset,
        limit=pagination.page_size,
    )

    return PaginatedResponse(
        data=[AuditLogResponse.model_validate(log) for log in result.items],
        meta=PaginationMeta.build(result.total, pagination),
    )

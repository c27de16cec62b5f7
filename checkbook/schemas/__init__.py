"""
Pydantic schemas for API request/response validation.

This package provides all Pydantic models used for:
- Request validation
- Response serialization
- API documentation
"""

from checkbook.schemas.account import (
    AccountCreate,
    AccountResponse,
    AccountSharingUpdate,
)
from checkbook.schemas.account_permission import (
    AccountAccessResponse,
    AccountPermissionCreate,
    AccountPermissionResponse,
    AccountPermissionUpdate,
    UserSummary,
)
from checkbook.schemas.audit import AuditLogFilterParams, AuditLogResponse
from checkbook.schemas.common import (
    ErrorResponse,
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

__all__ = [
    # Common
    "ErrorResponse",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "SearchResult",
    # Account
    "AccountCreate",
    "AccountResponse",
    "AccountSharingUpdate",
    # Account permissions
    "AccountAccessResponse",
    "AccountPermissionCreate",
    "AccountPermissionResponse",
    "AccountPermissionUpdate",
    "UserSummary",
    # Permission requests
    "PendingCountResponse",
    "PermissionRequestCreate",
    "PermissionRequestFilterParams",
    "PermissionRequestResponse",
    "PermissionRequestReview",
    # Audit
    "AuditLogFilterParams",
    "AuditLogResponse",
]

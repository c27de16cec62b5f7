"""
Service layer for business logic.

This package provides service classes that implement business logic,
coordinate between repositories, and own transaction boundaries.
"""

from checkbook.services.account_permission_service import AccountPermissionService
from checkbook.services.account_service import AccountService
from checkbook.services.audit_service import AuditService, AuditWriteResult
from checkbook.services.permission_request_service import PermissionRequestService
from checkbook.services.permission_service import PermissionService

__all__ = [
    "AccountPermissionService",
    "AccountService",
    "AuditService",
    "AuditWriteResult",
    "PermissionRequestService",
    "PermissionService",
]

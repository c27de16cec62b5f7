"""
Repository layer for database operations.

Repositories encapsulate queries and flush changes; services own commits.
"""

from checkbook.repositories.account_permission_repository import (
    AccountPermissionRepository,
)
from checkbook.repositories.account_repository import AccountRepository
from checkbook.repositories.audit_repository import AuditLogRepository
from checkbook.repositories.base import BaseRepository
from checkbook.repositories.permission_request_repository import (
    PermissionRequestFilter,
    PermissionRequestRepository,
)
from checkbook.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "AccountRepository",
    "AccountPermissionRepository",
    "PermissionRequestRepository",
    "PermissionRequestFilter",
    "AuditLogRepository",
]

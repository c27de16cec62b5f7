"""
Database models for the Checkbook permissions service.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure proper initialization.
"""

from checkbook.models.account import Account
from checkbook.models.account_permission import AccountPermission
from checkbook.models.audit_log import AuditLog
from checkbook.models.base import Base
from checkbook.models.enums import (
    AuditAction,
    Capability,
    PermissionLevel,
    RequestStatus,
)
from checkbook.models.mixins import TimestampMixin
from checkbook.models.permission_request import PermissionRequest
from checkbook.models.user import User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Models
    "User",
    "Account",
    "AccountPermission",
    "PermissionRequest",
    "AuditLog",
    # Enums
    "AuditAction",
    "Capability",
    "PermissionLevel",
    "RequestStatus",
]

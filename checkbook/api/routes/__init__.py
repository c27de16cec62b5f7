"""
API routes for the Checkbook permissions service.

This package contains all API endpoint definitions organized by feature.
"""

from checkbook.api.routes import (
    account_permissions,
    accounts,
    audit_logs,
    health,
    permission_requests,
)

__all__ = [
    "account_permissions",
    "accounts",
    "audit_logs",
    "health",
    "permission_requests",
]

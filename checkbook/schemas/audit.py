"""
Audit log Pydantic schemas for API request/response handling.

This module provides:
- Audit log response schema
- Audit log filtering parameters
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from checkbook.models.enums import AuditAction


class AuditLogResponse(BaseModel):
    """
    Schema for audit log response.

    Attributes:
        id: Audit log entry ID
        account_id: Account the action concerned
        user_id: User who performed the action
        action_type: Action performed
        action_details: Action payload (None for a degraded entry)
        ip_address: IP address of the client
        user_agent: User agent string of the client
        created_at: Timestamp of the action
    """

    id: UUID = Field(description="Audit log entry ID")
    account_id: UUID = Field(description="Account the action concerned")
    user_id: UUID = Field(description="User who performed the action")
    action_type: AuditAction = Field(description="Action performed")
    action_details: dict[str, Any] | None = Field(
        default=None,
        description="Action payload",
    )
    ip_address: str | None = Field(default=None, description="Client IP address")
    user_agent: str | None = Field(default=None, description="Client user agent")
    created_at: datetime = Field(description="Timestamp of the action")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "account_id": "123e4567-e89b-12d3-a456-426614174002",
                "user_id": "123e4567-e89b-12d3-a456-426614174001",
                "action_type": "PERMISSION_GRANTED",
                "action_details": {
                    "granting_user_id": "123e4567-e89b-12d3-a456-426614174001",
                    "target_user_id": "123e4567-e89b-12d3-a456-426614174003",
                    "permission_level": "VIEW_ONLY",
                },
                "ip_address": "192.168.1.100",
                "user_agent": "Mozilla/5.0",
                "created_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class AuditLogFilterParams(BaseModel):
    """
    Query parameters for filtering audit logs.

    Attributes:
        user_id: Filter by acting user
        action_type: Filter by action type
        start_date: Filter logs at or after this date
        end_date: Filter logs at or before this date
    """

    user_id: UUID | None = Field(default=None, description="Filter by acting user")
    action_type: AuditAction | None = Field(
        default=None, description="Filter by action type"
    )
    start_date: datetime | None = Field(
        default=None,
        description="Filter logs at or after this date",
    )
    end_date: datetime | None = Field(
        default=None,
        description="Filter logs at or before this date",
    )

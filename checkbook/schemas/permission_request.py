"""
Permission request Pydantic schemas for API request/response handling.

This module provides:
- Request creation and review schemas
- Request response schema
- Request filtering parameters
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from checkbook.models.enums import PermissionLevel, RequestStatus
from checkbook.schemas.account_permission import UserSummary


class PermissionRequestCreate(BaseModel):
    """
    Schema for asking an account owner for a permission level.

    Attributes:
        account_id: Account the requester already has access to
        requested_permission: Level asked for
        message: Optional note for the owner
    """

    account_id: uuid.UUID = Field(description="Account to request access on")
    requested_permission: PermissionLevel = Field(
        description="Permission level requested",
        examples=[PermissionLevel.TRANSACTION_ONLY],
    )
    message: str | None = Field(
        default=None,
        max_length=1000,
        description="Optional note for the account owner",
    )


class PermissionRequestReview(BaseModel):
    """Body of approve and deny calls."""

    message: str | None = Field(
        default=None,
        max_length=1000,
        description="Optional note for the requester",
    )


class PermissionRequestResponse(BaseModel):
    """
    Schema for permission request response.

    Attributes:
        id: Request UUID
        account_id: Account the request concerns
        requester_id: User who made the request
        requested_permission: Level asked for
        current_permission: Level the requester held when asking
        request_message: Note from the requester
        status: PENDING, APPROVED, DENIED or CANCELLED
        reviewed_by: Owner who approved or denied
        review_message: Note from the reviewer
        created_at: When the request was made
        reviewed_at: When the request left PENDING
        requester: Requester details
    """

    id: uuid.UUID
    account_id: uuid.UUID
    requester_id: uuid.UUID
    requested_permission: PermissionLevel
    current_permission: PermissionLevel | None = None
    request_message: str | None = None
    status: RequestStatus
    reviewed_by: uuid.UUID | None = None
    review_message: str | None = None
    created_at: datetime
    reviewed_at: datetime | None = None
    requester: UserSummary

    model_config = ConfigDict(from_attributes=True)


class PermissionRequestFilterParams(BaseModel):
    """Query parameters for filtering the requests of one account."""

    status: RequestStatus | None = Field(default=None, description="Filter by status")
    requester_id: uuid.UUID | None = Field(
        default=None, description="Filter by requester"
    )
    reviewer_id: uuid.UUID | None = Field(
        default=None, description="Filter by reviewer"
    )
    start_date: datetime | None = Field(
        default=None, description="Requests created at or after this date"
    )
    end_date: datetime | None = Field(
        default=None, description="Requests created at or before this date"
    )


class PendingCountResponse(BaseModel):
    pending: int

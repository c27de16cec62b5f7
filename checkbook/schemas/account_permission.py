"""
Account permission Pydantic schemas for API request/response handling.

This module provides:
- Grant and update schemas
- Grant response schemas with user details
- The caller's access summary for an account
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from checkbook.models.enums import PermissionLevel


class AccountPermissionCreate(BaseModel):
    """
    Schema for granting a permission on an account.

    The grantee is identified either by ``user_id`` or by
    ``username_or_email``; exactly one of them must be given.
    """

    user_id: uuid.UUID | None = Field(
        default=None,
        description="ID of the user to grant access to",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )

    username_or_email: str | None = Field(
        default=None,
        min_length=1,
        max_length=255,
        description="Username or email of the user to grant access to",
        examples=["alice@example.com"],
    )

    permission_level: PermissionLevel = Field(
        description="Permission level to grant",
        examples=[PermissionLevel.VIEW_ONLY, PermissionLevel.TRANSACTION_ONLY],
    )

    @model_validator(mode="after")
    def check_single_target(self) -> "AccountPermissionCreate":
        if (self.user_id is None) == (self.username_or_email is None):
            raise ValueError("Provide exactly one of user_id or username_or_email")
        return self


class AccountPermissionUpdate(BaseModel):
    """Schema for changing the level of an existing grant."""

    permission_level: PermissionLevel = Field(
        description="New permission level",
        examples=[PermissionLevel.FULL_ACCESS],
    )


class UserSummary(BaseModel):
    """
    Summary of user information for permission responses.

    Attributes:
        id: User UUID
        username: Username
        email: Email address
        full_name: Full name
    """

    id: uuid.UUID = Field(description="User unique identifier")
    username: str = Field(description="Username")
    email: str = Field(description="Email address")
    full_name: str | None = Field(default=None, description="Full name (optional)")

    model_config = {"from_attributes": True}


class AccountPermissionResponse(BaseModel):
    """
    Schema for account permission response.

    Attributes:
        id: Grant UUID
        account_id: Account the grant applies to
        user_id: User who holds the grant
        permission_level: Level granted
        created_by: Owner who made the grant
        created_at: When the grant was created
        updated_at: When the grant was last changed
        user: Grantee details
    """

    id: uuid.UUID = Field(description="Grant unique identifier")
    account_id: uuid.UUID = Field(description="Account the grant applies to")
    user_id: uuid.UUID = Field(description="User who holds the grant")
    permission_level: PermissionLevel = Field(description="Permission level granted")
    created_by: uuid.UUID = Field(description="User who made the grant")
    created_at: datetime = Field(description="When the grant was created")
    updated_at: datetime = Field(description="When the grant was last changed")
    user: UserSummary = Field(description="Grantee details")

    model_config = {"from_attributes": True}


class AccountAccessResponse(BaseModel):
    """What the current user can do on an account."""

    account_id: uuid.UUID
    is_owner: bool
    permission_level: PermissionLevel | None = Field(
        default=None,
        description="Effective level (FULL_ACCESS for the owner)",
    )
    can_view: bool
    can_manage_transactions: bool
    can_modify_account: bool
    can_manage_permissions: bool

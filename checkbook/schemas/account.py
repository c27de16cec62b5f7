"""
Account Pydantic schemas for API request/response handling.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AccountCreate(BaseModel):
    """Schema for creating an account owned by the caller."""

    name: str = Field(
        min_length=1,
        max_length=100,
        description="Account name",
        examples=["Joint checking"],
    )
    description: str | None = Field(default=None, max_length=500)
    is_shared: bool = Field(default=False, description="Whether grants take effect")


class AccountSharingUpdate(BaseModel):
    is_shared: bool = Field(description="Turn sharing on or off")


class AccountResponse(BaseModel):
    """
    Schema for account response.

    Attributes:
        id: Account UUID
        user_id: Owner
        name: Account name
        description: Free text
        is_shared: Whether grants take effect
        current_balance: Balance as maintained by the transaction service
        created_at: When the account was created
        updated_at: When the account was last changed
    """

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str | None = None
    is_shared: bool
    current_balance: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

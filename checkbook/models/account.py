"""
Account model.

An account has exactly one owner (``user_id``). The owner implicitly holds
full access and never appears in account_permissions. Other users reach the
account only through an AccountPermission, and only while ``is_shared`` is
true; grants on an unshared account are kept but inactive.
"""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checkbook.models.base import Base
from checkbook.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from checkbook.models.account_permission import AccountPermission
    from checkbook.models.permission_request import PermissionRequest
    from checkbook.models.user import User


class Account(Base, TimestampMixin):
    """
    Financial account.

    Attributes:
        id: UUID primary key
        user_id: Owner of the account
        name: Display name
        description: Optional free text
        is_shared: Whether grants are honoured
        current_balance: Balance, maintained by the transaction service

    Relationships:
        owner: User who owns the account
        permissions: Grants to other users (deleted with the account)
        permission_requests: Requests for access (deleted with the account)
    """

    __tablename__ = "accounts"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    is_shared: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2),
        nullable=False,
        default=Decimal("0.00"),
    )

    owner: Mapped["User"] = relationship(
        "User",
        foreign_keys=[user_id],
        lazy="selectin",
    )

    permissions: Mapped[list["AccountPermission"]] = relationship(
        "AccountPermission",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    permission_requests: Mapped[list["PermissionRequest"]] = relationship(
        "PermissionRequest",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return (
            f"Account(id={self.id}, name={self.name}, "
            f"owner={self.user_id}, shared={self.is_shared})"
        )

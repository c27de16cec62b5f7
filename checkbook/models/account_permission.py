"""
AccountPermission model.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checkbook.models.base import Base
from checkbook.models.enums import PermissionLevel
from checkbook.models.mixins import TimestampMixin

if TYPE_CHECKING:
    from checkbook.models.account import Account
    from checkbook.models.user import User


class AccountPermission(Base, TimestampMixin):
    """
    Permission grant linking a non-owner user to a shared account.

    Attributes:
        id: UUID primary key
        account_id: Account being shared
        user_id: User holding the grant (never the account owner)
        permission_level: Granted level
        created_by: User who first granted access (the owner)

    Uniqueness:
        At most one grant per (account_id, user_id). Writers go through the
        repository's upsert so concurrent grants resolve to last-writer-wins
        instead of failing.

    Lifecycle:
        - Grants are hard-deleted on revoke (the audit log keeps the history)
        - Grants are deleted with their account
        - Grants survive toggling ``is_shared`` off, but are not honoured
          until the account is shared again
    """

    __tablename__ = "account_permissions"
    __table_args__ = (
        UniqueConstraint("account_id", "user_id", name="uq_account_permissions_account_user"),
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    permission_level: Mapped[PermissionLevel] = mapped_column(
        Enum(PermissionLevel, name="permission_level_enum"),
        nullable=False,
    )

    created_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
    )

    account: Mapped["Account"] = relationship(
        "Account",
        back_populates="permissions",
        foreign_keys=[account_id],
    )

    user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[user_id],
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"AccountPermission(id={self.id}, account_id={self.account_id}, "
            f"user_id={self.user_id}, permission={self.permission_level.value})"
        )

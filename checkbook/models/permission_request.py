"""
PermissionRequest model.

A user asks an account owner for a permission level; the owner approves or
denies, or the requester cancels. Only PENDING requests can transition.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from checkbook.models.base import Base
from checkbook.models.enums import PermissionLevel, RequestStatus
from checkbook.models.mixins import utcnow

if TYPE_CHECKING:
    from checkbook.models.account import Account
    from checkbook.models.user import User


class PermissionRequest(Base):
    """
    Request for a permission level on a shared account.

    Attributes:
        id: UUID primary key
        account_id: Target account
        requester_id: User asking for access
        requested_permission: Level asked for
        current_permission: Requester's grant when the request was made
        request_message: Optional note from the requester
        status: PENDING, APPROVED, DENIED or CANCELLED
        reviewed_by: Owner who approved or denied
        review_message: Optional note from the reviewer
        created_at: When the request was made
        reviewed_at: When the request left PENDING

    Single pending request:
        The partial unique index below allows at most one PENDING request per
        (account_id, requester_id). Terminal requests are unconstrained.
    """

    __tablename__ = "permission_requests"
    __table_args__ = (
        Index(
            "uq_permission_requests_pending",
            "account_id",
            "requester_id",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
        Index("ix_permission_requests_account_status", "account_id", "status"),
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    requested_permission: Mapped[PermissionLevel] = mapped_column(
        Enum(PermissionLevel, name="permission_level_enum"),
        nullable=False,
    )

    current_permission: Mapped[PermissionLevel | None] = mapped_column(
        Enum(PermissionLevel, name="permission_level_enum"),
        nullable=True,
    )

    request_message: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, name="request_status_enum"),
        nullable=False,
        default=RequestStatus.PENDING,
    )

    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    review_message: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    reviewed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    account: Mapped["Account"] = relationship(
        "Account",
        back_populates="permission_requests",
        foreign_keys=[account_id],
        lazy="selectin",
    )

    requester: Mapped["User"] = relationship(
        "User",
        foreign_keys=[requester_id],
        lazy="selectin",
    )

    reviewer: Mapped["User | None"] = relationship(
        "User",
        foreign_keys=[reviewed_by],
        lazy="selectin",
    )

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def __repr__(self) -> str:
        return (
            f"PermissionRequest(id={self.id}, account_id={self.account_id}, "
            f"requester_id={self.requester_id}, "
            f"requested={self.requested_permission.value}, status={self.status.value})"
        )

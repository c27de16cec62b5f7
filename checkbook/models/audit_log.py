"""
AuditLog model for the account audit trail.

Audit logs are WRITE-ONCE. They are never updated; the only deletion path is
the retention sweep in AuditService.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from checkbook.models.base import Base, JSONType
from checkbook.models.enums import AuditAction
from checkbook.models.mixins import utcnow


class AuditLog(Base):
    """
    Immutable record of a security-relevant action on an account.

    Attributes:
        id: UUID primary key
        account_id: Account the action concerned
        user_id: User who performed the action
        action_type: Type of action performed
        action_details: JSON payload describing the action (NULL when the
            payload could not be serialised and a degraded entry was written)
        ip_address: Client IP address
        user_agent: Client user agent
        created_at: When the action occurred

    Referential independence:
        account_id and user_id are stored by value without foreign keys so
        entries outlive the account or user they mention.

    Ordering:
        Newest first: created_at DESC, then id DESC as a stable tiebreak.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_account_created", "account_id", "created_at"),
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    action_type: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action_enum", native_enum=False, length=50),
        nullable=False,
        index=True,
    )

    action_details: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
    )

    ip_address: Mapped[str | None] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )

    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"AuditLog(id={self.id}, account_id={self.account_id}, "
            f"user_id={self.user_id}, action={self.action_type.value})"
        )

"""
Reusable mixins for database models.

- TimestampMixin: created_at and updated_at timestamps
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(UTC)


class TimestampMixin:
    """
    Mixin to add timestamp columns to models.

    Adds:
    - created_at: Timestamp when record was created (auto-set)
    - updated_at: Timestamp when record was last updated (auto-updated)

    Usage:
        class Account(Base, TimestampMixin):
            __tablename__ = "accounts"
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

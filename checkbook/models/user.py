"""
User model.

Identity only: authentication and profile management live in the identity
service that issues access tokens. Users are referenced here as account
owners, grantees, requesters and reviewers.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from checkbook.models.base import Base
from checkbook.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """
    User model.

    Attributes:
        id: UUID primary key (the ``sub`` claim of access tokens)
        username: Unique username
        email: Unique email address
        full_name: User's full name
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )

    full_name: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username})"

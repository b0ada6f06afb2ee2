"""SQLAlchemy models for Post Service."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from services.posts.database import Base


class ShadowUser(Base):
    """Replicated copy of a User Service account.

    Written only by the user event consumer. Email and name are not unique
    here; the User Service enforces that.
    """

    __tablename__ = "shadow_users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(15),
        index=True,
        nullable=False,
    )
    replicated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        """Return string representation of ShadowUser."""
        return f"<ShadowUser(id={self.id}, name={self.name})>"


class UserSyncState(Base):
    """Last user event applied per user id.

    Kept after the shadow row is deleted so that a late signup for a deleted
    user is recognised as stale.
    """

    __tablename__ = "user_sync_state"

    user_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
    )
    last_event_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )
    last_event_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class Post(Base):
    """A post written by a user.

    ``user_id`` points into ``shadow_users`` without a foreign key, so posts
    outlive the user that wrote them.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        index=True,
        nullable=False,
    )
    view_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        """Return string representation of Post."""
        return f"<Post(id={self.id}, title={self.title})>"

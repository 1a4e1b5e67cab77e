"""SQLAlchemy ORM models.

This module defines the per-user tables: ``saved_shows`` holds each user's
watchlist and ``user_ratings`` holds their scores. Both are keyed naturally
on (user_id, tmdb_show_id).
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SavedShow(Base):
    """A show on a user's watchlist."""

    __tablename__ = "saved_shows"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    tmdb_show_id: Mapped[int] = mapped_column(Integer)
    show_name: Mapped[str] = mapped_column(String(255))
    poster_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="want_to_watch")
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_show_id", name="uq_saved_shows_user_show"),
    )

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"SavedShow(id={self.id}, user_id={self.user_id}, tmdb_show_id={self.tmdb_show_id})"


class UserRating(Base):
    """A user's score and/or thumbs for a show."""

    __tablename__ = "user_ratings"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    tmdb_show_id: Mapped[int] = mapped_column(Integer)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    liked: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    rated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "tmdb_show_id", name="uq_user_ratings_user_show"),
    )

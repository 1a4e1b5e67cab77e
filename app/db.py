"""Database session management and repositories."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import create_engine, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_settings
from app.models import Base, SavedShow, UserRating


class ShowAlreadySaved(Exception):
    """Raised when a user saves a show that is already on their watchlist."""


def _database_url() -> str:
    """Return the SQLAlchemy URL from settings (defaults to local SQLite for dev)."""
    return get_settings().database_url


_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


engine = create_engine(_database_url(), future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_models() -> None:
    """Create tables if they do not exist (handy for local dev)."""
    Base.metadata.create_all(bind=engine)


def get_session() -> Iterator[Session]:
    """FastAPI-friendly dependency that manages commits/rollbacks."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WatchlistRepository:
    """Per-user access to the ``saved_shows`` table."""

    def list_for_user(self, session: Session, user_id: str) -> list[SavedShow]:
        query = (
            select(SavedShow)
            .where(SavedShow.user_id == user_id)
            .order_by(SavedShow.added_at.desc())
        )
        return list(session.execute(query).scalars())

    def get_by_show(self, session: Session, user_id: str, tmdb_show_id: int) -> SavedShow | None:
        query = select(SavedShow).where(
            SavedShow.user_id == user_id,
            SavedShow.tmdb_show_id == tmdb_show_id,
        )
        return session.execute(query).scalar_one_or_none()

    def get_owned(self, session: Session, user_id: str, saved_show_id: str) -> SavedShow | None:
        query = select(SavedShow).where(
            SavedShow.id == saved_show_id,
            SavedShow.user_id == user_id,
        )
        return session.execute(query).scalar_one_or_none()

    def add(
        self,
        session: Session,
        *,
        user_id: str,
        tmdb_show_id: int,
        show_name: str,
        poster_path: str | None,
    ) -> SavedShow:
        if self.get_by_show(session, user_id, tmdb_show_id):
            raise ShowAlreadySaved(tmdb_show_id)
        saved = SavedShow(
            user_id=user_id,
            tmdb_show_id=tmdb_show_id,
            show_name=show_name,
            poster_path=poster_path,
            status="want_to_watch",
            added_at=_utcnow(),
        )
        session.add(saved)
        try:
            session.flush()  # surface the unique constraint here, not at commit
        except IntegrityError as exc:
            raise ShowAlreadySaved(tmdb_show_id) from exc
        session.refresh(saved)
        return saved

    def update_status(self, session: Session, user_id: str, saved_show_id: str, status: str) -> SavedShow | None:
        saved = self.get_owned(session, user_id, saved_show_id)
        if saved is None:
            return None
        saved.status = status
        session.flush()
        return saved

    def remove(self, session: Session, user_id: str, saved_show_id: str) -> bool:
        saved = self.get_owned(session, user_id, saved_show_id)
        if saved is None:
            return False
        session.delete(saved)
        session.flush()
        return True


class RatingRepository:
    """Per-user access to the ``user_ratings`` table."""

    def get(self, session: Session, user_id: str, tmdb_show_id: int) -> UserRating | None:
        query = select(UserRating).where(
            UserRating.user_id == user_id,
            UserRating.tmdb_show_id == tmdb_show_id,
        )
        return session.execute(query).scalar_one_or_none()

    def upsert(
        self,
        session: Session,
        *,
        user_id: str,
        tmdb_show_id: int,
        score: int | None,
        liked: bool | None,
    ) -> UserRating:
        """Insert or overwrite the rating keyed on (user_id, tmdb_show_id).

        A single ``INSERT ... ON CONFLICT DO UPDATE`` so two first-time ratings
        for the same pair cannot trip the unique constraint.
        """

        dialect = session.get_bind().dialect.name
        try:
            insert = _UPSERT_INSERTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Rating upsert is not supported on {dialect}") from None

        stmt = insert(UserRating).values(
            id=str(uuid.uuid4()),
            user_id=user_id,
            tmdb_show_id=tmdb_show_id,
            score=score,
            liked=liked,
            rated_at=_utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "tmdb_show_id"],
            set_={
                "score": stmt.excluded.score,
                "liked": stmt.excluded.liked,
                "rated_at": stmt.excluded.rated_at,
            },
        )
        session.execute(stmt)

        query = (
            select(UserRating)
            .where(
                UserRating.user_id == user_id,
                UserRating.tmdb_show_id == tmdb_show_id,
            )
            .execution_options(populate_existing=True)
        )
        return session.execute(query).scalar_one()

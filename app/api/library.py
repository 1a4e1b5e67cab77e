"""Watchlist and rating routes for signed-in users."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.auth import get_current_user_id
from app.db import RatingRepository, ShowAlreadySaved, WatchlistRepository, get_session
from app.schemas import (
    RatingIn,
    RatingOut,
    RatingResponse,
    SavedShowIn,
    SavedShowOut,
    StatusUpdate,
    WatchlistContains,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["library"])
watchlist_repo = WatchlistRepository()
rating_repo = RatingRepository()


@router.get("/watchlist", response_model=list[SavedShowOut])
def get_watchlist(
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> list[SavedShowOut]:
    """The caller's saved shows, most recently added first."""

    return [SavedShowOut.model_validate(saved) for saved in watchlist_repo.list_for_user(session, user_id)]


@router.post("/watchlist", response_model=SavedShowOut, status_code=status.HTTP_201_CREATED)
def add_to_watchlist(
    payload: SavedShowIn,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> SavedShowOut:
    try:
        saved = watchlist_repo.add(
            session,
            user_id=user_id,
            tmdb_show_id=payload.tmdb_show_id,
            show_name=payload.show_name,
            poster_path=payload.poster_path,
        )
    except ShowAlreadySaved as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Show is already in your watchlist",
        ) from exc
    logger.info("User %s saved show %s", user_id, payload.tmdb_show_id)
    return SavedShowOut.model_validate(saved)


@router.get("/watchlist/contains/{tmdb_show_id}", response_model=WatchlistContains)
def is_show_in_watchlist(
    tmdb_show_id: int,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> WatchlistContains:
    return WatchlistContains(saved=watchlist_repo.get_by_show(session, user_id, tmdb_show_id) is not None)


@router.patch("/watchlist/{saved_show_id}", response_model=SavedShowOut)
def update_show_status(
    saved_show_id: str,
    payload: StatusUpdate,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> SavedShowOut:
    saved = watchlist_repo.update_status(session, user_id, saved_show_id, payload.status)
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Show not found in your watchlist")
    return SavedShowOut.model_validate(saved)


@router.delete("/watchlist/{saved_show_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_watchlist(
    saved_show_id: str,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> Response:
    if not watchlist_repo.remove(session, user_id, saved_show_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Show not found in your watchlist")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/ratings/{tmdb_show_id}", response_model=RatingOut)
def save_rating(
    tmdb_show_id: int,
    payload: RatingIn,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> RatingOut:
    if payload.score is not None and not 1 <= payload.score <= 10:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Score must be between 1 and 10")

    rating = rating_repo.upsert(
        session,
        user_id=user_id,
        tmdb_show_id=tmdb_show_id,
        score=payload.score,
        liked=payload.liked,
    )
    return RatingOut.model_validate(rating)


@router.get("/ratings/{tmdb_show_id}", response_model=RatingResponse)
def get_user_rating(
    tmdb_show_id: int,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
) -> RatingResponse:
    rating = rating_repo.get(session, user_id, tmdb_show_id)
    return RatingResponse(rating=RatingOut.model_validate(rating) if rating else None)

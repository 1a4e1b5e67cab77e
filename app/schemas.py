"""Pydantic request/response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


WatchStatus = Literal["want_to_watch", "watching", "dropped"]


class GenreOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ShowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    overview: str
    poster_path: str | None = None
    vote_average: float
    first_air_date: str
    genres: list[GenreOut]
    episode_run_time: list[int]
    number_of_seasons: int
    is_trending: bool = Field(alias="isTrending")


class ShowResponse(BaseModel):
    show: ShowOut


class SearchResultOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    poster_path: str | None = None
    first_air_date: str


class SearchResponse(BaseModel):
    results: list[SearchResultOut]


class ProviderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    provider_id: int
    provider_name: str
    logo_path: str | None = None


class EnrichedShowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    overview: str
    poster_path: str | None = None
    vote_average: float
    first_air_date: str
    genres: list[GenreOut]
    episode_run_time: list[int]
    number_of_seasons: int
    providers: list[ProviderOut]


class DetailsResponse(BaseModel):
    data: dict[str, EnrichedShowOut]


class GenresResponse(BaseModel):
    genres: list[GenreOut]


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class RegisterRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""


class ResetPasswordRequest(BaseModel):
    email: str = ""


class UpdatePasswordRequest(BaseModel):
    password: str = ""
    confirm_password: str = ""


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    user_id: str | None = None
    email: str | None = None
    redirect_to: str = "/"


class MessageResponse(BaseModel):
    success: str
    redirect_to: str | None = None


class SavedShowIn(BaseModel):
    tmdb_show_id: int = Field(gt=0)
    show_name: str = Field(min_length=1, max_length=255)
    poster_path: str | None = None


class SavedShowOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    tmdb_show_id: int
    show_name: str
    poster_path: str | None = None
    status: WatchStatus
    added_at: datetime


class StatusUpdate(BaseModel):
    status: WatchStatus


class WatchlistContains(BaseModel):
    saved: bool


class RatingIn(BaseModel):
    score: int | None = None
    liked: bool | None = None


class RatingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    tmdb_show_id: int
    score: int | None = None
    liked: bool | None = None
    rated_at: datetime


class RatingResponse(BaseModel):
    rating: RatingOut | None = None

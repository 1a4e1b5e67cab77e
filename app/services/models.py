"""Shared dataclasses and constants for the show service layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Mode(str, Enum):
    FOOD = "food"
    FREETIME = "freetime"


# Comedy, Reality, Animation, Talk
FOOD_GENRES: tuple[int, ...] = (35, 10764, 16, 10767)
MIN_RATING = 6.0


@dataclass(frozen=True, slots=True)
class Genre:
    id: int
    name: str


ALL_GENRES: tuple[Genre, ...] = (
    Genre(35, "Comedy"),
    Genre(18, "Drama"),
    Genre(10759, "Action & Adventure"),
    Genre(9648, "Mystery"),
    Genre(10765, "Sci-Fi & Fantasy"),
    Genre(80, "Crime"),
    Genre(99, "Documentary"),
    Genre(16, "Animation"),
    Genre(10764, "Reality"),
    Genre(10767, "Talk"),
)


@dataclass(slots=True)
class ShowSummary:
    """A show as returned by TMDb listing and search endpoints."""

    id: int
    name: str
    overview: str = ""
    poster_path: str | None = None
    vote_average: float = 0.0
    first_air_date: str = ""
    genre_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ShowSummary":
        return cls(
            id=int(payload["id"]),
            name=payload.get("name") or "",
            overview=payload.get("overview") or "",
            poster_path=payload.get("poster_path"),
            vote_average=float(payload.get("vote_average") or 0.0),
            first_air_date=payload.get("first_air_date") or "",
            genre_ids=[int(gid) for gid in payload.get("genre_ids") or []],
        )


@dataclass(slots=True)
class ShowDetail:
    """Full TMDb record for a single show."""

    id: int
    name: str
    overview: str = ""
    poster_path: str | None = None
    vote_average: float = 0.0
    first_air_date: str = ""
    genres: list[Genre] = field(default_factory=list)
    episode_run_time: list[int] = field(default_factory=list)
    number_of_seasons: int = 0

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ShowDetail":
        return cls(
            id=int(payload["id"]),
            name=payload.get("name") or "",
            overview=payload.get("overview") or "",
            poster_path=payload.get("poster_path"),
            vote_average=float(payload.get("vote_average") or 0.0),
            first_air_date=payload.get("first_air_date") or "",
            genres=[Genre(id=int(g["id"]), name=g.get("name", "")) for g in payload.get("genres") or []],
            episode_run_time=[int(m) for m in payload.get("episode_run_time") or []],
            number_of_seasons=int(payload.get("number_of_seasons") or 0),
        )


@dataclass(slots=True)
class Show(ShowDetail):
    """The randomly selected show, tagged with trending membership."""

    is_trending: bool = False

    @classmethod
    def from_detail(cls, detail: ShowDetail, *, is_trending: bool) -> "Show":
        return cls(
            id=detail.id,
            name=detail.name,
            overview=detail.overview,
            poster_path=detail.poster_path,
            vote_average=detail.vote_average,
            first_air_date=detail.first_air_date,
            genres=list(detail.genres),
            episode_run_time=list(detail.episode_run_time),
            number_of_seasons=detail.number_of_seasons,
            is_trending=is_trending,
        )


@dataclass(frozen=True, slots=True)
class WatchProvider:
    provider_id: int
    provider_name: str
    logo_path: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "WatchProvider":
        return cls(
            provider_id=int(payload["provider_id"]),
            provider_name=payload.get("provider_name") or "",
            logo_path=payload.get("logo_path"),
        )


@dataclass(slots=True)
class EnrichedShowDetail(ShowDetail):
    """Show details plus the subscription providers for one region."""

    providers: list[WatchProvider] = field(default_factory=list)

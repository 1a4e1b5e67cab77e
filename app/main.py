"""FastAPI entrypoint wiring the show picker, account and library routes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import account, library
from app.core.config import get_settings
from app.db import init_models
from app.schemas import (
    DetailsResponse,
    EnrichedShowOut,
    GenreOut,
    GenresResponse,
    SearchResponse,
    SearchResultOut,
    ShowOut,
    ShowResponse,
)
from app.services.models import ALL_GENRES, FOOD_GENRES, Mode
from app.services.shows import (
    InvalidShowIds,
    get_many_details,
    get_random_show,
    get_trending_ids,
    search_shows,
)
from app.services.supabase_auth import AuthConfigError
from app.services.tmdb import TMDbClient

logger = logging.getLogger(__name__)

SEARCH_RESULT_LIMIT = 10


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Ensure database tables exist before serving."""

    init_models()
    yield


app = FastAPI(title="Show Picker", lifespan=lifespan)
app.include_router(account.router)
app.include_router(library.router)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(AuthConfigError)
async def auth_config_error_handler(_: Request, exc: AuthConfigError) -> JSONResponse:
    logger.error("Auth is not configured: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Something went wrong. Please try again."},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field_errors.setdefault(".".join(loc) or "request", error.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "fieldErrors": field_errors},
    )


def get_tmdb_client() -> TMDbClient:
    return TMDbClient()


@app.get("/api/shows", response_model=ShowResponse)
async def random_show(
    mode: Mode | None = None,
    genre: int | None = Query(default=None, gt=0),
    tmdb: TMDbClient = Depends(get_tmdb_client),
):
    """Pick one show at random, optionally narrowed by mood and genre."""

    try:
        trending_ids = await get_trending_ids(tmdb)
        show = await get_random_show(tmdb, mode, genre, trending_ids)
    except Exception:
        logger.exception("Error fetching shows (mode=%s, genre=%s)", mode, genre)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch shows"},
        )

    if show is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "No shows found matching your criteria"},
        )
    return ShowResponse(show=ShowOut.model_validate(asdict(show)))


@app.get("/api/shows/search", response_model=SearchResponse)
async def search(
    q: str | None = None,
    tmdb: TMDbClient = Depends(get_tmdb_client),
):
    if not q or not q.strip():
        return SearchResponse(results=[])

    try:
        results = await search_shows(tmdb, q)
    except Exception:
        logger.exception("Search error for %r", q)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to search shows"},
        )
    return SearchResponse(
        results=[SearchResultOut.model_validate(asdict(show)) for show in results[:SEARCH_RESULT_LIMIT]]
    )


@app.get("/api/shows/details", response_model=DetailsResponse)
async def show_details(
    ids: str | None = None,
    region: str | None = Query(default=None, pattern=r"^[A-Za-z]{2}$"),
    tmdb: TMDbClient = Depends(get_tmdb_client),
):
    """Enrich up to 20 shows with details and subscription providers."""

    if not ids:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "ids parameter is required"},
        )

    region_code = (region or get_settings().tmdb_default_region).upper()
    try:
        data = await get_many_details(tmdb, ids.split(","), region_code)
    except InvalidShowIds as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )
    return DetailsResponse(
        data={show_id: EnrichedShowOut.model_validate(asdict(detail)) for show_id, detail in data.items()}
    )


@app.get("/api/genres", response_model=GenresResponse)
def list_genres(mode: Mode | None = None) -> GenresResponse:
    """Genres offered by the picker; food mode narrows them to light viewing."""

    genres = ALL_GENRES
    if mode is Mode.FOOD:
        genres = tuple(genre for genre in ALL_GENRES if genre.id in FOOD_GENRES)
    return GenresResponse(genres=[GenreOut(id=genre.id, name=genre.name) for genre in genres])

"""Show selection, enrichment and search built on top of the TMDb client."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Iterable, Sequence, TypeVar

from app.services.models import (
    FOOD_GENRES,
    MIN_RATING,
    EnrichedShowDetail,
    Mode,
    Show,
    ShowSummary,
)
from app.services.tmdb import TMDbClient


logger = logging.getLogger(__name__)

MAX_DETAIL_IDS = 20

T = TypeVar("T")


class InvalidShowIds(ValueError):
    """Raised when a detail batch request carries no usable ids or too many."""


def dedupe_shows(shows: Iterable[ShowSummary]) -> list[ShowSummary]:
    """Collapse duplicate ids.

    An id keeps the position of its first occurrence but the payload of its
    last one.
    """

    by_id: dict[int, ShowSummary] = {}
    for show in shows:
        by_id[show.id] = show
    return list(by_id.values())


def filter_by_rating(shows: Iterable[ShowSummary], min_rating: float = MIN_RATING) -> list[ShowSummary]:
    return [show for show in shows if show.vote_average >= min_rating]


def filter_by_mode(shows: Iterable[ShowSummary], mode: Mode | None) -> list[ShowSummary]:
    if mode is None:
        return list(shows)
    if mode is Mode.FOOD:
        return [show for show in shows if any(gid in FOOD_GENRES for gid in show.genre_ids)]
    # freetime: all genres allowed
    return list(shows)


def filter_by_genre(shows: Iterable[ShowSummary], genre_id: int | None) -> list[ShowSummary]:
    if not genre_id:
        return list(shows)
    return [show for show in shows if genre_id in show.genre_ids]


def pick_random(items: Sequence[T], *, rng: random.Random | None = None) -> T | None:
    """Return a uniformly chosen element, or ``None`` for an empty sequence."""

    if not items:
        return None
    return items[(rng or random).randrange(len(items))]


async def get_trending_ids(client: TMDbClient) -> set[int]:
    trending = await client.get_trending_shows()
    return {show.id for show in trending}


async def get_random_show(
    client: TMDbClient,
    mode: Mode | None,
    genre_id: int | None,
    trending_ids: set[int],
    *,
    rng: random.Random | None = None,
) -> Show | None:
    """Pick one show from trending + popular listings and fetch its details.

    Returns ``None`` when no candidate survives the filters.
    """

    trending, popular_first, popular_second = await asyncio.gather(
        client.get_trending_shows(),
        client.get_popular_shows(1),
        client.get_popular_shows(2),
    )
    candidates = dedupe_shows([*trending, *popular_first, *popular_second])

    filtered = filter_by_rating(candidates)
    filtered = filter_by_mode(filtered, mode)
    filtered = filter_by_genre(filtered, genre_id)
    logger.debug(
        "Show candidates: %d unique, %d after filters (mode=%s, genre=%s)",
        len(candidates),
        len(filtered),
        mode.value if mode else None,
        genre_id,
    )

    selected = pick_random(filtered, rng=rng)
    if selected is None:
        return None

    details = await client.get_show_details(selected.id)
    return Show.from_detail(details, is_trending=details.id in trending_ids)


async def get_enriched_show_data(client: TMDbClient, show_id: int, region: str) -> EnrichedShowDetail:
    details, providers = await asyncio.gather(
        client.get_show_details(show_id),
        client.get_flatrate_providers(show_id, region),
    )
    return EnrichedShowDetail(
        id=details.id,
        name=details.name,
        overview=details.overview,
        poster_path=details.poster_path,
        vote_average=details.vote_average,
        first_air_date=details.first_air_date,
        genres=details.genres,
        episode_run_time=details.episode_run_time,
        number_of_seasons=details.number_of_seasons,
        providers=providers,
    )


def parse_show_ids(raw_ids: Iterable[object]) -> list[int]:
    """Keep the positive integer ids, first-seen order, without duplicates.

    Every valid entry counts toward the cap, repeats included.
    """

    ids: list[int] = []
    for raw in raw_ids:
        if isinstance(raw, bool):
            continue
        try:
            value = int(str(raw).strip())
        except ValueError:
            continue
        if value > 0:
            ids.append(value)
            if len(ids) > MAX_DETAIL_IDS:
                raise InvalidShowIds(f"Maximum {MAX_DETAIL_IDS} IDs allowed")
    if not ids:
        raise InvalidShowIds("No valid IDs provided")
    return list(dict.fromkeys(ids))


async def get_many_details(
    client: TMDbClient,
    raw_ids: Iterable[object],
    region: str,
) -> dict[str, EnrichedShowDetail]:
    """Enrich each id independently; ids whose lookups fail are left out."""

    ids = parse_show_ids(raw_ids)
    results = await asyncio.gather(
        *(get_enriched_show_data(client, show_id, region) for show_id in ids),
        return_exceptions=True,
    )
    data: dict[str, EnrichedShowDetail] = {}
    for show_id, result in zip(ids, results):
        if isinstance(result, BaseException):
            logger.warning("Enrichment failed for show %s: %s", show_id, result)
            continue
        data[str(show_id)] = result
    return data


async def search_shows(client: TMDbClient, query: str) -> list[ShowSummary]:
    if not query.strip():
        return []
    return await client.search(query)

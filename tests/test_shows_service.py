import asyncio
import random
from collections import Counter

import pytest

from app.services import shows as shows_service
from app.services.models import Mode, ShowSummary
from app.services.shows import InvalidShowIds
from app.services.tmdb import TMDbError


def _show(show_id, vote=7.0, genre_ids=(18,), name=None):
    return ShowSummary(
        id=show_id,
        name=name or f"Show {show_id}",
        vote_average=vote,
        genre_ids=list(genre_ids),
    )


def test_filter_by_rating_keeps_only_shows_at_or_above_floor():
    shows = [_show(1, 5.99), _show(2, 6.0), _show(3, 9.1), _show(4, 0.0)]
    kept = shows_service.filter_by_rating(shows)
    assert [s.id for s in kept] == [2, 3]
    assert all(s.vote_average >= 6.0 for s in kept)


def test_filter_by_mode_variants():
    shows = [_show(1, genre_ids=[35]), _show(2, genre_ids=[18]), _show(3, genre_ids=[18, 10767])]
    assert [s.id for s in shows_service.filter_by_mode(shows, None)] == [1, 2, 3]
    assert [s.id for s in shows_service.filter_by_mode(shows, Mode.FREETIME)] == [1, 2, 3]
    assert [s.id for s in shows_service.filter_by_mode(shows, Mode.FOOD)] == [1, 3]


def test_filter_by_genre_requires_membership():
    shows = [_show(1, genre_ids=[35, 18]), _show(2, genre_ids=[99])]
    assert [s.id for s in shows_service.filter_by_genre(shows, 18)] == [1]
    assert [s.id for s in shows_service.filter_by_genre(shows, None)] == [1, 2]


def test_dedupe_keeps_first_position_and_last_payload():
    first = _show(1, name="first")
    other = _show(2)
    last = _show(1, name="last")
    merged = shows_service.dedupe_shows([first, other, last])
    assert [s.id for s in merged] == [1, 2]
    assert merged[0].name == "last"


def test_pick_random_empty_returns_none():
    assert shows_service.pick_random([]) is None


def test_pick_random_returns_member():
    items = ["a", "b", "c", "d"]
    rng = random.Random(7)
    for _ in range(50):
        assert shows_service.pick_random(items, rng=rng) in items


def test_pick_random_is_roughly_uniform():
    items = ["a", "b", "c"]
    trials = 3000
    rng = random.Random(1234)
    counts = Counter(shows_service.pick_random(items, rng=rng) for _ in range(trials))
    expected = trials / len(items)
    chi_square = sum((counts[item] - expected) ** 2 / expected for item in items)
    # df=2, p=0.001
    assert chi_square < 13.82


def test_get_random_show_food_with_documentary_is_empty(tmdb_client, fake_tmdb):
    trending_ids = asyncio.run(shows_service.get_trending_ids(tmdb_client))
    show = asyncio.run(shows_service.get_random_show(tmdb_client, Mode.FOOD, 99, trending_ids))
    assert show is None
    assert not any(path.startswith("/tv/") and path[4:].isdigit() for path in fake_tmdb.paths())


def test_get_random_show_fetches_details_for_pick_only(tmdb_client, fake_tmdb):
    show = asyncio.run(shows_service.get_random_show(tmdb_client, None, 99, {1, 2}))
    assert show is not None
    assert show.id == 4
    assert show.is_trending is False
    assert [g.name for g in show.genres] == ["Documentary"]
    detail_calls = [p for p in fake_tmdb.paths() if p.startswith("/tv/") and p[4:].isdigit()]
    assert detail_calls == ["/tv/4"]


def test_get_random_show_marks_trending(tmdb_client):
    show = asyncio.run(shows_service.get_random_show(tmdb_client, Mode.FOOD, 35, {1, 2}))
    assert show.id == 1
    assert show.is_trending is True


def test_get_random_show_propagates_upstream_errors(tmdb_client, fake_tmdb):
    fake_tmdb.routes["/tv/popular?page=2"] = 503
    with pytest.raises(TMDbError) as excinfo:
        asyncio.run(shows_service.get_random_show(tmdb_client, None, None, set()))
    assert excinfo.value.status_code == 503


def test_get_many_details_rejects_empty_or_invalid_ids(tmdb_client):
    with pytest.raises(InvalidShowIds, match="No valid IDs"):
        asyncio.run(shows_service.get_many_details(tmdb_client, [], "GB"))
    with pytest.raises(InvalidShowIds, match="No valid IDs"):
        asyncio.run(shows_service.get_many_details(tmdb_client, [0, -1, "x"], "GB"))


def test_get_many_details_rejects_more_than_twenty(tmdb_client, fake_tmdb):
    with pytest.raises(InvalidShowIds, match="Maximum 20"):
        asyncio.run(shows_service.get_many_details(tmdb_client, list(range(1, 22)), "GB"))
    assert fake_tmdb.calls == []


def test_get_many_details_omits_failed_ids(tmdb_client, fake_tmdb):
    fake_tmdb.routes["/tv/2"] = 500
    data = asyncio.run(shows_service.get_many_details(tmdb_client, [1, 2], "GB"))
    assert list(data) == ["1"]
    assert [p.provider_name for p in data["1"].providers] == ["Netflix"]
    assert data["1"].number_of_seasons == 3


def test_get_many_details_missing_region_means_no_providers(tmdb_client):
    data = asyncio.run(shows_service.get_many_details(tmdb_client, ["1", "2"], "US"))
    assert set(data) == {"1", "2"}
    assert data["1"].providers == []
    assert data["2"].providers == []


def test_parse_show_ids_drops_invalid_and_duplicates():
    assert shows_service.parse_show_ids(["3", " 1", "x", "0", "3", "-4", "2.5"]) == [3, 1]


@pytest.mark.parametrize("query", ["", "   "])
def test_search_shows_blank_query_skips_tmdb(tmdb_client, fake_tmdb, query):
    assert asyncio.run(shows_service.search_shows(tmdb_client, query)) == []
    assert fake_tmdb.calls == []


def test_search_shows_returns_results_verbatim(tmdb_client, fake_tmdb):
    results = asyncio.run(shows_service.search_shows(tmdb_client, "result"))
    assert len(results) == 12
    assert fake_tmdb.calls[0].url.params["query"] == "result"


def test_parse_show_ids_counts_repeats_toward_the_cap():
    with pytest.raises(InvalidShowIds, match="Maximum 20"):
        shows_service.parse_show_ids(["1"] * 21)
    assert shows_service.parse_show_ids(["1"] * 20) == [1]
    assert shows_service.parse_show_ids(["1", "x", "1", "2"]) == [1, 2]

from __future__ import annotations

from typing import Any

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings
from app.db import get_session
from app.main import app, get_tmdb_client
from app.models import Base
from app.services.tmdb import TMDbClient

JWT_SECRET = "test-jwt-secret-that-is-long-enough-for-hs256"


@pytest.fixture(autouse=True)
def reset_env(monkeypatch):
    monkeypatch.setenv("TMDB_API_KEY", "test-key")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("SUPABASE_JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("SITE_URL", "https://shows.test")
    monkeypatch.delenv("AUTH_DEV_FALLBACK", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    app.dependency_overrides.clear()


def _summary(show_id: int, name: str, vote: float, genre_ids: list[int]) -> dict[str, Any]:
    return {
        "id": show_id,
        "name": name,
        "overview": f"{name} overview",
        "poster_path": f"/{show_id}.jpg",
        "vote_average": vote,
        "first_air_date": "2020-01-01",
        "genre_ids": genre_ids,
    }


def _detail(show_id: int, name: str, vote: float, genres: list[tuple[int, str]]) -> dict[str, Any]:
    return {
        "id": show_id,
        "name": name,
        "overview": f"{name} overview",
        "poster_path": f"/{show_id}.jpg",
        "vote_average": vote,
        "first_air_date": "2020-01-01",
        "genres": [{"id": gid, "name": gname} for gid, gname in genres],
        "episode_run_time": [30],
        "number_of_seasons": 3,
    }


class FakeTMDb:
    """httpx MockTransport handler serving canned TMDb payloads by path."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.routes: dict[str, Any] = {
            "/trending/tv/week": {
                "results": [
                    _summary(1, "Alpha", 8.0, [35]),
                    _summary(2, "Bravo", 7.5, [18]),
                ]
            },
            "/tv/popular?page=1": {
                "results": [
                    _summary(3, "Charlie", 5.0, [35]),
                    _summary(4, "Delta", 7.0, [99]),
                    _summary(1, "Alpha (popular)", 8.2, [35]),
                ]
            },
            "/tv/popular?page=2": {
                "results": [
                    _summary(5, "Echo", 6.0, [10764]),
                ]
            },
            "/tv/1": _detail(1, "Alpha", 8.2, [(35, "Comedy")]),
            "/tv/2": _detail(2, "Bravo", 7.5, [(18, "Drama")]),
            "/tv/4": _detail(4, "Delta", 7.0, [(99, "Documentary")]),
            "/tv/5": _detail(5, "Echo", 6.0, [(10764, "Reality")]),
            "/tv/1/watch/providers": {
                "id": 1,
                "results": {
                    "GB": {
                        "flatrate": [
                            {"provider_id": 8, "provider_name": "Netflix", "logo_path": "/netflix.png"},
                        ],
                        "rent": [
                            {"provider_id": 2, "provider_name": "Apple TV", "logo_path": "/apple.png"},
                        ],
                    }
                },
            },
            "/tv/2/watch/providers": {"id": 2, "results": {}},
            "/search/tv": {
                "results": [_summary(100 + i, f"Result {i}", 7.0, [18]) for i in range(12)]
            },
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        key = request.url.path.removeprefix("/3")
        if key == "/tv/popular":
            key = f"{key}?page={request.url.params.get('page')}"
        result = self.routes.get(key)
        if result is None:
            return httpx.Response(404, json={"status_message": "The resource could not be found."})
        if isinstance(result, int):
            return httpx.Response(result, json={"status_message": "error"})
        return httpx.Response(200, json=result)

    def paths(self) -> list[str]:
        return [request.url.path.removeprefix("/3") for request in self.calls]

    def client(self, **kwargs) -> TMDbClient:
        kwargs.setdefault("api_key", "test-key")
        return TMDbClient(
            base_url="https://tmdb.test/3",
            transport=httpx.MockTransport(self),
            **kwargs,
        )


@pytest.fixture
def fake_tmdb() -> FakeTMDb:
    return FakeTMDb()


@pytest.fixture
def tmdb_client(fake_tmdb) -> TMDbClient:
    return fake_tmdb.client()


@pytest.fixture
def client(fake_tmdb):
    app.dependency_overrides[get_tmdb_client] = lambda: fake_tmdb.client()
    return TestClient(app)


@pytest.fixture
def db_session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def _override_session():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_session] = _override_session
    yield factory
    engine.dispose()


def make_token(user_id: str = "user-1", **claims: Any) -> str:
    payload = {"sub": user_id, "email": f"{user_id}@example.com", "aud": "authenticated", **claims}
    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers

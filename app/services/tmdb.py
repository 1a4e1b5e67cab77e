"""Thin async wrapper around the TMDb API for TV show metadata."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import get_settings
from app.services.models import ShowDetail, ShowSummary, WatchProvider


logger = logging.getLogger(__name__)


class TMDbError(Exception):
    """Base exception for TMDb-related failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TMDbConfigError(TMDbError):
    """Raised when the TMDb API key is missing."""


class TMDbClient:
    """TMDb HTTP client using API key auth and a one-hour cache hint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        cache_seconds: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.tmdb_api_key
        self.base_url = (base_url or settings.tmdb_base_url).rstrip("/")
        self.cache_seconds = cache_seconds if cache_seconds is not None else settings.tmdb_cache_seconds
        self._transport = transport

    async def fetch_resource(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` from TMDb and return the decoded JSON body."""

        if not self.api_key:
            raise TMDbConfigError("TMDB_API_KEY environment variable is not set")
        query = {"api_key": self.api_key}
        if params:
            query.update({k: str(v) for k, v in params.items() if v is not None})
        headers = {"Cache-Control": f"max-age={self.cache_seconds}"}
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(f"{self.base_url}{path}", params=query, headers=headers)
        if not response.is_success:
            raise TMDbError(
                f"TMDB API error: {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def get_trending_shows(self) -> list[ShowSummary]:
        payload = await self.fetch_resource("/trending/tv/week")
        return [ShowSummary.from_payload(item) for item in payload.get("results", [])]

    async def get_popular_shows(self, page: int = 1) -> list[ShowSummary]:
        payload = await self.fetch_resource("/tv/popular", {"page": page})
        return [ShowSummary.from_payload(item) for item in payload.get("results", [])]

    async def get_show_details(self, show_id: int) -> ShowDetail:
        payload = await self.fetch_resource(f"/tv/{show_id}")
        return ShowDetail.from_payload(payload)

    async def get_watch_providers(self, show_id: int, region: str) -> dict[str, Any] | None:
        """Return the provider entry for ``region`` or ``None`` when TMDb has none."""

        payload = await self.fetch_resource(f"/tv/{show_id}/watch/providers")
        return (payload.get("results") or {}).get(region)

    async def get_flatrate_providers(self, show_id: int, region: str) -> list[WatchProvider]:
        entry = await self.get_watch_providers(show_id, region)
        if not entry:
            return []
        return [WatchProvider.from_payload(item) for item in entry.get("flatrate") or []]

    async def search(self, query: str) -> list[ShowSummary]:
        payload = await self.fetch_resource("/search/tv", {"query": query})
        logger.debug("TMDb search payload for %r: %d results", query, len(payload.get("results", [])))
        return [ShowSummary.from_payload(item) for item in payload.get("results", [])]

"""HTTP client for the Trakt API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import UTC
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from episync.adapters.http_resilience import ResilientClient, served_from_cache

from .schema import (
    TraktEpisode,
    TraktErrorResponse,
    TraktHistoryItem,
    TraktSeason,
    TraktSyncResponse,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    import httpx

    from episync.config.http_resilience import ResilienceConfig
    from episync.config.trakt import TraktConfig

log = getLogger(__name__)

HISTORY_PAGE_SIZE = 100
PAGE_COUNT_HEADER = "X-Pagination-Page-Count"

_SEASONS = TypeAdapter(list[TraktSeason])
_HISTORY = TypeAdapter(list[TraktHistoryItem])


class TraktAPIError(RuntimeError):
    """Raised when the Trakt API returns an unexpected or error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TraktAuthError(TraktAPIError):
    """Raised when a user-scoped endpoint is called without an access token."""


@dataclass(frozen=True, slots=True)
class CachedPayload[T]:
    data: T
    from_cache: bool


class TraktClient:
    """Low-level HTTP client for the Trakt API."""

    def __init__(
        self,
        *,
        config: TraktConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    @property
    def has_access_token(self) -> bool:
        return bool(self._config.access_token)

    def fetch_show_seasons(self, show_trakt_id: int) -> CachedPayload[list[TraktSeason]]:
        return asyncio.run(self._fetch_show_seasons_async(show_trakt_id))

    def fetch_episode(
        self, show_trakt_id: int, season_number: int, episode_number: int
    ) -> CachedPayload[TraktEpisode]:
        return asyncio.run(
            self._fetch_episode_async(show_trakt_id, season_number, episode_number)
        )

    def fetch_show_history(
        self, show_trakt_id: int, *, start_at: datetime | None = None
    ) -> list[TraktHistoryItem]:
        return asyncio.run(
            self._fetch_history_async(f"/sync/history/shows/{show_trakt_id}", start_at)
        )

    def fetch_episode_history(
        self, episode_trakt_id: int, *, start_at: datetime | None = None
    ) -> list[TraktHistoryItem]:
        return asyncio.run(
            self._fetch_history_async(f"/sync/history/episodes/{episode_trakt_id}", start_at)
        )

    def add_history(self, payload: dict[str, object]) -> TraktSyncResponse:
        return asyncio.run(self._post_sync_async("/sync/history", payload))

    def remove_history(self, payload: dict[str, object]) -> TraktSyncResponse:
        return asyncio.run(self._post_sync_async("/sync/history/remove", payload))

    async def _fetch_show_seasons_async(
        self, show_trakt_id: int
    ) -> CachedPayload[list[TraktSeason]]:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(
                f"/shows/{show_trakt_id}/seasons",
                params={"extended": "full,episodes"},
            )
            payload = self._json(response)
        return CachedPayload(_SEASONS.validate_python(payload), served_from_cache(response))

    async def _fetch_episode_async(
        self, show_trakt_id: int, season_number: int, episode_number: int
    ) -> CachedPayload[TraktEpisode]:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(
                f"/shows/{show_trakt_id}/seasons/{season_number}/episodes/{episode_number}",
                params={"extended": "full"},
            )
            payload = self._json(response)
        return CachedPayload(TraktEpisode.model_validate(payload), served_from_cache(response))

    async def _fetch_history_async(
        self, path: str, start_at: datetime | None
    ) -> list[TraktHistoryItem]:
        headers = self._auth_headers()
        items: list[TraktHistoryItem] = []
        page = 1
        async with self._client_factory(self._resilience) as client:
            while True:
                params: dict[str, str | int] = {"page": page, "limit": HISTORY_PAGE_SIZE}
                if start_at is not None:
                    params["start_at"] = start_at.astimezone(UTC).isoformat()
                response = await client.get(path, params=params, headers=headers)
                items.extend(_HISTORY.validate_python(self._json(response)))

                page_count = _page_count(response)
                if page >= page_count:
                    break
                page += 1
        log.debug("Fetched %s history items from %s over %s page(s)", len(items), path, page)
        return items

    async def _post_sync_async(self, path: str, payload: dict[str, object]) -> TraktSyncResponse:
        async with self._client_factory(self._resilience) as client:
            response = await client.post(path, json=payload, headers=self._auth_headers())
            body = self._json(response)
        return TraktSyncResponse.model_validate(body)

    def _auth_headers(self) -> dict[str, str]:
        token = self._config.access_token
        if not token:
            raise TraktAuthError("Trakt access token is not configured")
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _json(response: httpx.Response) -> object:
        if response.is_error:
            message = f"Trakt returned HTTP {response.status_code} for {response.request.url}"
            try:
                error = TraktErrorResponse.model_validate(response.json())
            except ValueError:
                error = None
            if error is not None and error.error_description:
                message = f"{message}: {error.error_description}"
            raise TraktAPIError(message, status_code=response.status_code)
        return response.json()


def _page_count(response: httpx.Response) -> int:
    raw = response.headers.get(PAGE_COUNT_HEADER)
    if raw is None:
        return 1
    try:
        return int(raw)
    except ValueError:
        log.warning("Ignoring malformed %s header: %r", PAGE_COUNT_HEADER, raw)
        return 1

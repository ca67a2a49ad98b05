"""HTTP client for the TMDb v3 API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from episync.adapters.http_resilience import ResilientClient, served_from_cache

from .schema import TmdbEpisode, TmdbErrorResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from episync.config.http_resilience import ResilienceConfig
    from episync.config.tmdb import TmdbConfig

log = getLogger(__name__)


class TmdbAPIError(RuntimeError):
    """Raised when the TMDb API returns an unexpected or error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class CachedPayload[T]:
    data: T
    from_cache: bool


class TmdbClient:
    """Low-level HTTP client for the TMDb API."""

    def __init__(
        self,
        *,
        config: TmdbConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_episode(
        self, tmdb_id: int, season_number: int, episode_number: int
    ) -> CachedPayload[TmdbEpisode]:
        return asyncio.run(self._fetch_episode_async(tmdb_id, season_number, episode_number))

    async def _fetch_episode_async(
        self, tmdb_id: int, season_number: int, episode_number: int
    ) -> CachedPayload[TmdbEpisode]:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(
                f"/tv/{tmdb_id}/season/{season_number}/episode/{episode_number}",
                params=self._params(append="external_ids"),
            )
            payload = self._json(response)
        from_cache = served_from_cache(response)
        log.debug(
            "Fetched TMDb episode S%sE%s of show %s (cached: %s)",
            season_number,
            episode_number,
            tmdb_id,
            from_cache,
        )
        return CachedPayload(TmdbEpisode.model_validate(payload), from_cache)

    def _params(self, *, append: str | None = None) -> dict[str, str]:
        params = {"api_key": self._config.api_key}
        if append is not None:
            params["append_to_response"] = append
        return params

    @staticmethod
    def _json(response: httpx.Response) -> object:
        if response.is_error:
            message = f"TMDb returned HTTP {response.status_code} for {response.request.url.path}"
            try:
                error = TmdbErrorResponse.model_validate(response.json())
            except ValueError:
                error = None
            if error is not None and error.status_message:
                message = f"{message}: {error.status_message}"
            raise TmdbAPIError(message, status_code=response.status_code)
        return response.json()

"""TMDb-backed episode source."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from episync.domain.results import ErrorResult, Success

from .client import TmdbAPIError
from .translator import translate_episode

if TYPE_CHECKING:
    from episync.domain.model import Episode
    from episync.domain.ports import ExternalIdMapper
    from episync.domain.results import Result

    from .client import TmdbClient

log = getLogger(__name__)

_REMOTE_ERRORS = (httpx.HTTPError, TmdbAPIError, ValueError)


class TmdbEpisodeSource:
    def __init__(self, *, client: TmdbClient, show_ids: ExternalIdMapper) -> None:
        self._client = client
        self._show_ids = show_ids

    def get_episode(
        self, show_id: int, season_number: int, episode_number: int
    ) -> Result[Episode]:
        tmdb_id = self._show_ids(show_id)
        if tmdb_id is None:
            return ErrorResult(reason=f"No TMDb id known for show {show_id}")
        try:
            fetched = self._client.fetch_episode(tmdb_id, season_number, episode_number)
        except _REMOTE_ERRORS as exc:
            log.warning(
                "TMDb episode fetch for show %s S%sE%s failed: %s",
                show_id,
                season_number,
                episode_number,
                exc,
            )
            return ErrorResult(reason=f"TMDb episode fetch failed: {exc}", error=exc)
        return Success(translate_episode(fetched.data), response_modified=not fetched.from_cache)


if TYPE_CHECKING:
    from typing import cast

    from episync.domain.ports import EpisodeDataSource

    _client_stub = cast("TmdbClient", object())
    _mapper_stub = cast("ExternalIdMapper", object())
    _episode_check: EpisodeDataSource = TmdbEpisodeSource(
        client=_client_stub, show_ids=_mapper_stub
    )

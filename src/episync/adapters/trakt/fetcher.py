"""Trakt-backed data sources, watch history and session state."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from episync.domain.results import ErrorResult, Success

from .client import TraktAPIError
from .translator import (
    build_add_payload,
    build_remove_payload,
    translate_episode,
    translate_history_item,
    translate_season,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from episync.domain.model import Episode, EpisodeWatchEntry, Season
    from episync.domain.ports import ExternalIdMapper
    from episync.domain.results import Result

    from .client import TraktClient
    from .schema import TraktHistoryItem

log = getLogger(__name__)

_REMOTE_ERRORS = (httpx.HTTPError, TraktAPIError, ValidationError, ValueError)


def _guarded[T](description: str, call: Callable[[], Result[T]]) -> Result[T]:
    try:
        return call()
    except _REMOTE_ERRORS as exc:
        log.warning("Trakt %s failed: %s", description, exc)
        return ErrorResult(reason=f"Trakt {description} failed: {exc}", error=exc)


def _unmapped(kind: str, local_id: int | None) -> ErrorResult:
    log.warning("No Trakt id known for %s %s", kind, local_id)
    return ErrorResult(reason=f"No Trakt id known for {kind} {local_id}")


class TraktSeasonsEpisodesSource:
    def __init__(self, *, client: TraktClient, show_ids: ExternalIdMapper) -> None:
        self._client = client
        self._show_ids = show_ids

    def get_seasons_episodes(self, show_id: int) -> Result[list[tuple[Season, list[Episode]]]]:
        trakt_id = self._show_ids(show_id)
        if trakt_id is None:
            return _unmapped("show", show_id)

        def fetch() -> Result[list[tuple[Season, list[Episode]]]]:
            fetched = self._client.fetch_show_seasons(trakt_id)
            seasons = [translate_season(season) for season in fetched.data]
            return Success(seasons, response_modified=not fetched.from_cache)

        return _guarded(f"seasons fetch for show {show_id}", fetch)


class TraktEpisodeSource:
    def __init__(self, *, client: TraktClient, show_ids: ExternalIdMapper) -> None:
        self._client = client
        self._show_ids = show_ids

    def get_episode(
        self, show_id: int, season_number: int, episode_number: int
    ) -> Result[Episode]:
        trakt_id = self._show_ids(show_id)
        if trakt_id is None:
            return _unmapped("show", show_id)

        def fetch() -> Result[Episode]:
            fetched = self._client.fetch_episode(trakt_id, season_number, episode_number)
            return Success(
                translate_episode(fetched.data), response_modified=not fetched.from_cache
            )

        return _guarded(
            f"episode fetch for show {show_id} S{season_number}E{episode_number}", fetch
        )


class TraktWatchHistorySource:
    """Watch history of the user owning the configured access token."""

    def __init__(
        self,
        *,
        client: TraktClient,
        show_ids: ExternalIdMapper,
        episode_ids: ExternalIdMapper,
    ) -> None:
        self._client = client
        self._show_ids = show_ids
        self._episode_ids = episode_ids

    def get_show_episode_watches(
        self, show_id: int, since: datetime | None = None
    ) -> Result[list[tuple[Episode, EpisodeWatchEntry]]]:
        trakt_id = self._show_ids(show_id)
        if trakt_id is None:
            return _unmapped("show", show_id)

        def fetch() -> Result[list[tuple[Episode, EpisodeWatchEntry]]]:
            items = self._client.fetch_show_history(trakt_id, start_at=since)
            return Success(_episode_watches(items))

        return _guarded(f"history fetch for show {show_id}", fetch)

    def get_episode_watches(
        self, episode_id: int, since: datetime | None = None
    ) -> Result[list[EpisodeWatchEntry]]:
        trakt_id = self._episode_ids(episode_id)
        if trakt_id is None:
            return _unmapped("episode", episode_id)

        def fetch() -> Result[list[EpisodeWatchEntry]]:
            items = self._client.fetch_episode_history(trakt_id, start_at=since)
            entries = [entry for _, entry in _episode_watches(items)]
            for entry in entries:
                entry.episode_id = episode_id
            return Success(entries)

        return _guarded(f"history fetch for episode {episode_id}", fetch)

    def add_episode_watches(self, entries: Sequence[EpisodeWatchEntry]) -> Result[None]:
        watches: list[tuple[int, datetime]] = []
        for entry in entries:
            trakt_id = self._episode_trakt_id(entry)
            if trakt_id is None:
                return _unmapped("episode", entry.episode_id)
            watches.append((trakt_id, entry.watched_at))

        def upload() -> Result[None]:
            response = self._client.add_history(build_add_payload(watches))
            added = response.added.episodes if response.added else 0
            log.debug("Trakt reported %s added episode plays", added)
            return Success(None)

        return _guarded(f"upload of {len(watches)} watches", upload)

    def remove_episode_watches(self, entries: Sequence[EpisodeWatchEntry]) -> Result[None]:
        """Remove single plays by their history id.

        Entries Trakt never assigned a history id to are skipped; removing by episode id
        would delete every play of that episode.
        """

        history_ids = [entry.trakt_id for entry in entries if entry.trakt_id is not None]
        if len(history_ids) < len(entries):
            log.debug("Skipping %s entries without a history id", len(entries) - len(history_ids))
        if not history_ids:
            return Success(None)

        def remove() -> Result[None]:
            response = self._client.remove_history(build_remove_payload(history_ids))
            deleted = response.deleted.episodes if response.deleted else 0
            log.debug("Trakt reported %s deleted episode plays", deleted)
            return Success(None)

        return _guarded(f"removal of {len(history_ids)} watches", remove)

    def _episode_trakt_id(self, entry: EpisodeWatchEntry) -> int | None:
        if entry.episode_id is None:
            return None
        return self._episode_ids(entry.episode_id)


class TraktAuthState:
    """Authenticated whenever an access token is configured."""

    def __init__(self, client: TraktClient) -> None:
        self._client = client

    def is_authenticated(self) -> bool:
        return self._client.has_access_token


def _episode_watches(
    items: Sequence[TraktHistoryItem],
) -> list[tuple[Episode, EpisodeWatchEntry]]:
    watches: list[tuple[Episode, EpisodeWatchEntry]] = []
    for item in items:
        translated = translate_history_item(item)
        if translated is None:
            log.debug("Skipping non-episode history item %s", item.id)
            continue
        watches.append(translated)
    return watches


if TYPE_CHECKING:
    from typing import cast

    from episync.domain.ports import (
        AuthState,
        EpisodeDataSource,
        SeasonsEpisodesDataSource,
        WatchHistorySource,
    )

    _client_stub = cast("TraktClient", object())
    _mapper_stub = cast("ExternalIdMapper", object())
    _seasons_check: SeasonsEpisodesDataSource = TraktSeasonsEpisodesSource(
        client=_client_stub, show_ids=_mapper_stub
    )
    _episode_check: EpisodeDataSource = TraktEpisodeSource(
        client=_client_stub, show_ids=_mapper_stub
    )
    _history_check: WatchHistorySource = TraktWatchHistorySource(
        client=_client_stub, show_ids=_mapper_stub, episode_ids=_mapper_stub
    )
    _auth_check: AuthState = TraktAuthState(_client_stub)

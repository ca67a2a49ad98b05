"""Fetch remote metadata and watch history and apply it to local storage."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from episync.domain.errors import EpisodeNotFoundError, PreconditionError, SeasonNotFoundError
from episync.domain.merge import merge_episode, merge_season
from episync.domain.model import Episode, RefreshType, Request, Season
from episync.domain.results import ErrorResult, Success

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from concurrent.futures import Future
    from datetime import datetime

    from episync.domain.model import EpisodeWatchEntry
    from episync.domain.ports import (
        AuthState,
        EpisodeDataSource,
        SeasonsEpisodesDataSource,
        SeasonsEpisodesStore,
        SeasonWithEpisodes,
        SyncUnitOfWork,
        WatchHistorySource,
    )
    from episync.domain.refresh_policy import RefreshPolicy
    from episync.domain.results import Result

log = getLogger(__name__)

DELTA_BOUNDARY = timedelta(seconds=1)


class RemoteSyncDriver:
    """Orchestrates remote calls, id translation and storage writes.

    Metadata comes from Trakt (authoritative) and TMDb (secondary); watch history comes
    from Trakt only and is skipped entirely without an authenticated session.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], SyncUnitOfWork],
        refresh_policy: RefreshPolicy,
        trakt_seasons_source: SeasonsEpisodesDataSource,
        trakt_episode_source: EpisodeDataSource,
        tmdb_episode_source: EpisodeDataSource,
        watch_source: WatchHistorySource,
        auth_state: AuthState,
    ) -> None:
        self._uow = unit_of_work_factory
        self._refresh_policy = refresh_policy
        self._trakt_seasons_source = trakt_seasons_source
        self._trakt_episode_source = trakt_episode_source
        self._tmdb_episode_source = tmdb_episode_source
        self._watch_source = watch_source
        self._auth_state = auth_state

    # Metadata -------------------------------------------------------------------------

    def update_seasons_episodes(self, show_id: int) -> None:
        result = self._trakt_seasons_source.get_seasons_episodes(show_id)
        match result:
            case Success(response_modified=False):
                log.debug("Seasons for show %s not modified, skipping", show_id)
                return
            case ErrorResult(reason=reason):
                log.warning("Could not fetch seasons for show %s: %s", show_id, reason)
                return
            case Success(data=remote_seasons):
                pass

        with self._uow() as uow:
            store = uow.repositories.seasons_episodes
            merged = [
                self._merge_season_tree(store, show_id, season, episodes)
                for season, episodes in _distinct_by_number(remote_seasons, key=_season_number)
            ]
            store.save_show_seasons(show_id, merged)
            uow.commit()

        log.info("Saved %s seasons for show %s", len(merged), show_id)
        self._refresh_policy.record_success(Request.SHOW_SEASONS, show_id)

    def _merge_season_tree(
        self,
        store: SeasonsEpisodesStore,
        show_id: int,
        season: Season,
        episodes: Sequence[Episode],
    ) -> SeasonWithEpisodes:
        local_season = _lookup(store.get_season_with_trakt_id, season.trakt_id) or Season(
            show_id=show_id
        )
        merged_season = merge_season(local_season, season, None)

        merged_episodes: list[Episode] = []
        for episode in _distinct_by_number(episodes, key=_episode_number):
            local_episode = _lookup(store.get_episode_with_trakt_id, episode.trakt_id) or Episode(
                season_id=merged_season.id
            )
            merged_episodes.append(merge_episode(local_episode, episode, None))
        return merged_season, merged_episodes

    def update_episode(self, episode_id: int) -> Episode:
        """Refresh one episode from both providers concurrently and persist the merge."""

        with self._uow() as uow:
            store = uow.repositories.seasons_episodes
            local = store.get_episode(episode_id)
            if local is None:
                raise EpisodeNotFoundError(episode_id)
            season = store.get_season(local.season_id) if local.season_id is not None else None
            if season is None:
                raise SeasonNotFoundError(local.season_id)

        if season.show_id is None or season.number is None or local.number is None:
            raise PreconditionError(f"Episode {episode_id} is missing its show, season or number")
        args = (season.show_id, season.number, local.number)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="episode-fetch") as pool:
            trakt_future = pool.submit(self._trakt_episode_source.get_episode, *args)
            tmdb_future = pool.submit(self._tmdb_episode_source.get_episode, *args)
            trakt = _data_or_none(trakt_future, provider="trakt", episode_id=episode_id)
            tmdb = _data_or_none(tmdb_future, provider="tmdb", episode_id=episode_id)

        merged = merge_episode(local, trakt, tmdb)
        with self._uow() as uow:
            saved = uow.repositories.seasons_episodes.save_episode(merged)
            uow.commit()

        if trakt is not None or tmdb is not None:
            self._refresh_policy.record_success(Request.EPISODE_DETAILS, episode_id)
        return saved

    # Watch history --------------------------------------------------------------------

    def update_show_episode_watches_if_needed(
        self,
        show_id: int,
        refresh_type: RefreshType,
        *,
        force_refresh: bool = False,
        last_updated: datetime | None = None,
    ) -> None:
        policy = self._refresh_policy
        request = Request.SHOW_EPISODE_WATCHES
        if refresh_type is RefreshType.QUICK:
            # With a remote last-updated time and a previous fetch we can do a delta fetch
            if last_updated is not None and policy.has_been_requested(request, show_id):
                if force_refresh or policy.is_stale(request, show_id, cutoff=last_updated):
                    self.update_show_episode_watches(show_id, since=last_updated + DELTA_BOUNDARY)
            elif force_refresh or policy.is_stale(request, show_id):
                self.update_show_episode_watches(show_id)
        elif refresh_type is RefreshType.FULL:
            if force_refresh or policy.is_stale(request, show_id):
                self.update_show_episode_watches(show_id)

    def update_show_episode_watches(self, show_id: int, since: datetime | None = None) -> None:
        if not self._auth_state.is_authenticated():
            log.debug("Not authenticated, skipping watch sync for show %s", show_id)
            return
        if since is not None:
            self.fetch_new_show_watches(show_id, since)
        else:
            self.fetch_show_watches(show_id)

    def fetch_show_watches(self, show_id: int) -> None:
        """Full fetch: replace the show's reconciled watch set with the remote one."""

        match self._watch_source.get_show_episode_watches(show_id, None):
            case ErrorResult(reason=reason):
                log.warning("Could not fetch watches for show %s: %s", show_id, reason)
                return
            case Success(data=remote):
                pass

        with self._uow() as uow:
            watches = self._resolve_watches(uow.repositories.seasons_episodes, remote)
            uow.repositories.episode_watches.sync_show_watch_entries(show_id, watches)
            uow.commit()

        log.info("Synced %s watches for show %s", len(watches), show_id)
        self._refresh_policy.record_success(Request.SHOW_EPISODE_WATCHES, show_id)

    def fetch_new_show_watches(self, show_id: int, since: datetime) -> None:
        """Delta fetch: add or update watches newer than ``since``; never removes."""

        match self._watch_source.get_show_episode_watches(show_id, since):
            case ErrorResult(reason=reason):
                log.warning("Could not fetch new watches for show %s: %s", show_id, reason)
                return
            case Success(data=remote):
                pass

        with self._uow() as uow:
            watches = self._resolve_watches(uow.repositories.seasons_episodes, remote)
            uow.repositories.episode_watches.upsert_remote_entries(watches)
            uow.commit()

        log.info("Stored %s new watches for show %s since %s", len(watches), show_id, since)
        self._refresh_policy.record_success(Request.SHOW_EPISODE_WATCHES, show_id)

    def update_episode_watches(self, episode_id: int) -> None:
        """Replace an episode's reconciled watch set with the remote one, ungated."""

        if not self._auth_state.is_authenticated():
            return

        match self._watch_source.get_episode_watches(episode_id, None):
            case ErrorResult(reason=reason):
                log.warning("Could not fetch watches for episode %s: %s", episode_id, reason)
                return
            case Success(data=remote):
                pass

        watches = [replace(entry, id=None, episode_id=episode_id) for entry in remote]
        with self._uow() as uow:
            uow.repositories.episode_watches.sync_episode_watch_entries(episode_id, watches)
            uow.commit()

    @staticmethod
    def _resolve_watches(
        store: SeasonsEpisodesStore,
        remote: Iterable[tuple[Episode, EpisodeWatchEntry]],
    ) -> list[EpisodeWatchEntry]:
        watches: list[EpisodeWatchEntry] = []
        for episode, entry in remote:
            episode_id = _lookup(store.get_episode_id_for_trakt_id, episode.trakt_id)
            if episode_id is None:
                log.debug("Dropping watch for unknown episode trakt id %s", episode.trakt_id)
                continue
            watches.append(replace(entry, id=None, episode_id=episode_id))
        return watches


def _lookup[T](getter: Callable[[int], T | None], key: int | None) -> T | None:
    if key is None:
        return None
    return getter(key)


def _season_number(item: tuple[Season, Sequence[Episode]]) -> int | None:
    return item[0].number


def _episode_number(episode: Episode) -> int | None:
    return episode.number


def _distinct_by_number[T](items: Iterable[T], *, key: Callable[[T], int | None]) -> list[T]:
    """Keep the first item for each ordinal, preserving input order."""

    seen: set[int | None] = set()
    distinct: list[T] = []
    for item in items:
        number = key(item)
        if number in seen:
            continue
        seen.add(number)
        distinct.append(item)
    return distinct


def _data_or_none[T](
    future: Future[Result[T]],
    *,
    provider: str,
    episode_id: int,
) -> T | None:
    try:
        result = future.result()
    except Exception:  # noqa: BLE001
        log.exception("%s fetch for episode %s raised", provider, episode_id)
        return None
    match result:
        case Success(data=data):
            return data
        case ErrorResult(reason=reason):
            log.warning("%s fetch for episode %s failed: %s", provider, episode_id, reason)
            return None


__all__ = ["DELTA_BOUNDARY", "RemoteSyncDriver"]

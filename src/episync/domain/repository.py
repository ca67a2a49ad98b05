"""Public facade over season, episode and watch-history reconciliation."""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from episync.domain.clock import Clock, ensure_aware, utcnow
from episync.domain.errors import EpisodeNotFoundError, SeasonNotFoundError
from episync.domain.model import ActionDate, EpisodeWatchEntry, PendingAction, Request

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from episync.domain.model import Episode, RefreshType
    from episync.domain.pending_queue import PendingActionQueue
    from episync.domain.ports import AuthState, SeasonWithEpisodes, SyncUnitOfWork
    from episync.domain.refresh_policy import RefreshPolicy
    from episync.domain.sync_driver import RemoteSyncDriver

log = getLogger(__name__)

AIR_DATE_WATCH_OFFSET = timedelta(hours=1)


class SeasonsEpisodesRepository:
    """The only entry point other subsystems use for seasons, episodes and watches.

    Mutations always write locally first so readers see them immediately, then drain the
    pending-action queue for the affected scope. Remote propagation failures are not
    raised; they leave entries pending until the next drain.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], SyncUnitOfWork],
        refresh_policy: RefreshPolicy,
        sync_driver: RemoteSyncDriver,
        pending_queue: PendingActionQueue,
        auth_state: AuthState,
        clock: Clock = utcnow,
    ) -> None:
        self._uow = unit_of_work_factory
        self._refresh_policy = refresh_policy
        self._driver = sync_driver
        self._queue = pending_queue
        self._auth_state = auth_state
        self._clock = clock

    # Reads ----------------------------------------------------------------------------

    def seasons_for_show(self, show_id: int) -> list[SeasonWithEpisodes]:
        with self._uow() as uow:
            return uow.repositories.seasons_episodes.get_show_seasons_with_episodes(show_id)

    def get_episode(self, episode_id: int) -> Episode | None:
        with self._uow() as uow:
            return uow.repositories.seasons_episodes.get_episode(episode_id)

    def episode_watches(self, episode_id: int) -> list[EpisodeWatchEntry]:
        with self._uow() as uow:
            return uow.repositories.episode_watches.get_watches_for_episode(episode_id)

    # Freshness ------------------------------------------------------------------------

    def need_show_seasons_update(self, show_id: int, expiry: timedelta | None = None) -> bool:
        return self._refresh_policy.is_stale(Request.SHOW_SEASONS, show_id, expiry=expiry)

    def need_show_episode_watches_sync(
        self, show_id: int, expiry: timedelta | None = None
    ) -> bool:
        return self._refresh_policy.is_stale(
            Request.SHOW_EPISODE_WATCHES, show_id, expiry=expiry
        )

    def need_episode_update(self, episode_id: int, expiry: timedelta | None = None) -> bool:
        return self._refresh_policy.is_stale(Request.EPISODE_DETAILS, episode_id, expiry=expiry)

    # Remote refresh -------------------------------------------------------------------

    def update_seasons_episodes(self, show_id: int) -> None:
        self._driver.update_seasons_episodes(show_id)

    def update_episode(self, episode_id: int) -> Episode:
        return self._driver.update_episode(episode_id)

    def update_show_episode_watches_if_needed(
        self,
        show_id: int,
        refresh_type: RefreshType,
        *,
        force_refresh: bool = False,
        last_updated: datetime | None = None,
    ) -> None:
        self._driver.update_show_episode_watches_if_needed(
            show_id,
            refresh_type,
            force_refresh=force_refresh,
            last_updated=last_updated,
        )

    def update_show_episode_watches(self, show_id: int, since: datetime | None = None) -> None:
        self._driver.update_show_episode_watches(show_id, since)

    def sync_episode_watches_for_show(self, show_id: int) -> None:
        """Drain the show's pending queue, re-fetching its watches if the remote changed."""

        if self._queue.drain_show(show_id) and self._auth_state.is_authenticated():
            self._driver.fetch_show_watches(show_id)

    def remove_show_season_data(self, show_id: int) -> None:
        with self._uow() as uow:
            uow.repositories.seasons_episodes.delete_show_season_data(show_id)
            uow.commit()

    # Mutations ------------------------------------------------------------------------

    def mark_season_watched(self, season_id: int, *, only_aired: bool, date: ActionDate) -> None:
        now = self._clock()
        with self._uow() as uow:
            season = uow.repositories.seasons_episodes.get_season(season_id)
            if season is None or season.show_id is None:
                raise SeasonNotFoundError(season_id)
            watches = uow.repositories.episode_watches
            to_save: list[EpisodeWatchEntry] = []
            for episode in uow.repositories.seasons_episodes.get_episodes_in_season(season_id):
                if episode.id is None:
                    continue
                if only_aired and not episode.has_aired(now):
                    continue
                if watches.has_episode_been_watched(episode.id):
                    continue
                to_save.append(
                    EpisodeWatchEntry(
                        episode_id=episode.id,
                        watched_at=_watch_timestamp(episode, date, now),
                        pending_action=PendingAction.UPLOAD,
                    )
                )
            if to_save:
                watches.save(to_save)
                uow.commit()
            show_id = season.show_id

        log.info("Marked %s episodes of season %s watched", len(to_save), season_id)
        # Drains the whole show rather than only this season
        self.sync_episode_watches_for_show(show_id)

    def mark_season_unwatched(self, season_id: int) -> None:
        with self._uow() as uow:
            season = uow.repositories.seasons_episodes.get_season(season_id)
            if season is None or season.show_id is None:
                raise SeasonNotFoundError(season_id)
            ids: list[int] = []
            for episode in uow.repositories.seasons_episodes.get_episodes_in_season(season_id):
                if episode.id is None:
                    continue
                ids.extend(
                    watch.id
                    for watch in uow.repositories.episode_watches.get_watches_for_episode(
                        episode.id
                    )
                    if watch.id is not None
                )
            if ids:
                uow.repositories.episode_watches.update_pending_action(ids, PendingAction.DELETE)
                uow.commit()
            show_id = season.show_id

        self.sync_episode_watches_for_show(show_id)

    def mark_episode_watched(self, episode_id: int, timestamp: datetime) -> None:
        entry = EpisodeWatchEntry(
            episode_id=episode_id,
            watched_at=ensure_aware(timestamp),
            pending_action=PendingAction.UPLOAD,
        )
        with self._uow() as uow:
            if uow.repositories.seasons_episodes.get_episode(episode_id) is None:
                raise EpisodeNotFoundError(episode_id)
            uow.repositories.episode_watches.save([entry])
            uow.commit()

        self._sync_episode_watches(episode_id)

    def mark_episode_unwatched(self, episode_id: int) -> None:
        with self._uow() as uow:
            watches = uow.repositories.episode_watches
            ids = [w.id for w in watches.get_watches_for_episode(episode_id) if w.id is not None]
            if ids:
                # Soft delete first; rows go away once the removal is propagated
                watches.update_pending_action(ids, PendingAction.DELETE)
                uow.commit()

        self._sync_episode_watches(episode_id)

    def remove_episode_watch(self, watch_id: int) -> None:
        with self._uow() as uow:
            watches = uow.repositories.episode_watches
            watch = watches.get_episode_watch(watch_id)
            if watch is None or watch.pending_action is PendingAction.DELETE:
                return
            watches.update_pending_action([watch_id], PendingAction.DELETE)
            uow.commit()
            episode_id = watch.episode_id

        if episode_id is not None:
            self._sync_episode_watches(episode_id)

    def _sync_episode_watches(self, episode_id: int) -> None:
        if self._queue.drain_episode(episode_id) and self._auth_state.is_authenticated():
            self._driver.update_episode_watches(episode_id)


def _watch_timestamp(episode: Episode, date: ActionDate, now: datetime) -> datetime:
    if date is ActionDate.AIR_DATE and episode.first_aired is not None:
        return episode.first_aired + AIR_DATE_WATCH_OFFSET
    return now


__all__ = ["AIR_DATE_WATCH_OFFSET", "SeasonsEpisodesRepository"]

"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from episync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from episync.adapters.tmdb import TmdbClient, TmdbEpisodeSource
from episync.adapters.trakt import (
    TraktAuthState,
    TraktClient,
    TraktEpisodeSource,
    TraktSeasonsEpisodesSource,
    TraktWatchHistorySource,
)
from episync.config import get_sync_config, get_tmdb_config, get_trakt_config
from episync.domain.clock import utcnow
from episync.domain.id_mapping import EpisodeTraktIdMapper, ShowIdMapper
from episync.domain.model import ActionDate, Provider, RefreshType, Show
from episync.domain.pending_queue import PendingActionQueue
from episync.domain.ports.unit_of_work import SyncUnitOfWork
from episync.domain.refresh_policy import RefreshPolicy
from episync.domain.repository import SeasonsEpisodesRepository
from episync.domain.sync_driver import RemoteSyncDriver

if TYPE_CHECKING:
    from datetime import datetime

    from episync.config import SyncConfig, TmdbConfig, TraktConfig
    from episync.domain.clock import Clock

UnitOfWorkFactory = Callable[[], SyncUnitOfWork]


log = getLogger(__name__)


def build_repository(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    trakt_config: TraktConfig | None = None,
    tmdb_config: TmdbConfig | None = None,
    sync_config: SyncConfig | None = None,
    clock: Clock = utcnow,
) -> SeasonsEpisodesRepository:
    """Wire the facade with the SQLAlchemy storage and the Trakt and TMDb adapters."""

    uow = unit_of_work_factory or SqlAlchemyUnitOfWork
    trakt = TraktClient(config=trakt_config or get_trakt_config())
    tmdb = TmdbClient(config=tmdb_config or get_tmdb_config())
    trakt_show_ids = ShowIdMapper(uow, Provider.TRAKT)
    tmdb_show_ids = ShowIdMapper(uow, Provider.TMDB)

    auth_state = TraktAuthState(trakt)
    watch_source = TraktWatchHistorySource(
        client=trakt,
        show_ids=trakt_show_ids,
        episode_ids=EpisodeTraktIdMapper(uow),
    )
    refresh_policy = RefreshPolicy(
        uow,
        clock=clock,
        default_expiry=(sync_config or get_sync_config()).expiry_overrides(),
    )
    driver = RemoteSyncDriver(
        unit_of_work_factory=uow,
        refresh_policy=refresh_policy,
        trakt_seasons_source=TraktSeasonsEpisodesSource(client=trakt, show_ids=trakt_show_ids),
        trakt_episode_source=TraktEpisodeSource(client=trakt, show_ids=trakt_show_ids),
        tmdb_episode_source=TmdbEpisodeSource(client=tmdb, show_ids=tmdb_show_ids),
        watch_source=watch_source,
        auth_state=auth_state,
    )
    queue = PendingActionQueue(
        unit_of_work_factory=uow,
        watch_source=watch_source,
        auth_state=auth_state,
    )
    return SeasonsEpisodesRepository(
        unit_of_work_factory=uow,
        refresh_policy=refresh_policy,
        sync_driver=driver,
        pending_queue=queue,
        auth_state=auth_state,
        clock=clock,
    )


def _ensure_started() -> None:
    if not is_started():
        startup()


def register_show(
    *,
    trakt_id: int,
    tmdb_id: int | None = None,
    title: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Show:
    """Store a show handle so its seasons and watches can be synchronised."""

    _ensure_started()
    uow_factory = unit_of_work_factory or SqlAlchemyUnitOfWork
    with uow_factory() as uow:
        show = uow.repositories.shows.add(Show(trakt_id=trakt_id, tmdb_id=tmdb_id, title=title))
        uow.commit()
    log.info("Registered show %s (trakt=%s, tmdb=%s)", show.id, trakt_id, tmdb_id)
    return show


def refresh_show_seasons(
    show_id: int,
    *,
    force: bool = False,
    repository: SeasonsEpisodesRepository | None = None,
) -> bool:
    """Refresh a show's seasons and episodes when stale; return whether a fetch ran."""

    _ensure_started()
    repo = repository or build_repository()
    if not force and not repo.need_show_seasons_update(show_id):
        log.info("Seasons for show %s are fresh, skipping", show_id)
        return False
    repo.update_seasons_episodes(show_id)
    return True


def refresh_episode(
    episode_id: int,
    *,
    repository: SeasonsEpisodesRepository | None = None,
) -> None:
    _ensure_started()
    repo = repository or build_repository()
    episode = repo.update_episode(episode_id)
    log.info("Refreshed episode %s: %s", episode_id, episode.title)


def sync_show_watches(
    show_id: int,
    *,
    refresh_type: RefreshType = RefreshType.QUICK,
    force: bool = False,
    last_updated: datetime | None = None,
    repository: SeasonsEpisodesRepository | None = None,
) -> None:
    """Push pending local changes for a show, then pull its remote watch history."""

    _ensure_started()
    repo = repository or build_repository()
    repo.sync_episode_watches_for_show(show_id)
    repo.update_show_episode_watches_if_needed(
        show_id,
        refresh_type,
        force_refresh=force,
        last_updated=last_updated,
    )


def mark_watched(
    *,
    episode_id: int | None = None,
    season_id: int | None = None,
    watched_at: datetime | None = None,
    only_aired: bool = True,
    date: ActionDate = ActionDate.NOW,
    repository: SeasonsEpisodesRepository | None = None,
) -> None:
    _ensure_started()
    repo = repository or build_repository()
    if episode_id is not None:
        repo.mark_episode_watched(episode_id, watched_at or utcnow())
    elif season_id is not None:
        repo.mark_season_watched(season_id, only_aired=only_aired, date=date)
    else:
        raise ValueError("Either an episode or a season is required")


def mark_unwatched(
    *,
    episode_id: int | None = None,
    season_id: int | None = None,
    watch_id: int | None = None,
    repository: SeasonsEpisodesRepository | None = None,
) -> None:
    _ensure_started()
    repo = repository or build_repository()
    if watch_id is not None:
        repo.remove_episode_watch(watch_id)
    elif episode_id is not None:
        repo.mark_episode_unwatched(episode_id)
    elif season_id is not None:
        repo.mark_season_unwatched(season_id)
    else:
        raise ValueError("Either a watch, an episode or a season is required")

"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, exists, select, update

from episync.adapters.sqlalchemy.mappings import (
    episode_table,
    episode_watch_entry_table,
    last_request_table,
    season_table,
)
from episync.domain.model import (
    Episode,
    EpisodeWatchEntry,
    LastRequest,
    PendingAction,
    Request,
    Season,
    Show,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.orm import Session
    from sqlalchemy.sql import Select

    from episync.domain.ports import SeasonWithEpisodes


class SqlAlchemyShowStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, show_id: int) -> Show | None:
        return self.session.get(Show, show_id)

    def add(self, show: Show) -> Show:
        persisted = self.session.merge(show)
        self.session.flush()
        return persisted


class SqlAlchemySeasonsEpisodesStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_season(self, season_id: int) -> Season | None:
        return self.session.get(Season, season_id)

    def get_season_with_trakt_id(self, trakt_id: int) -> Season | None:
        stmt = select(Season).where(season_table.c.trakt_id == trakt_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_episode(self, episode_id: int) -> Episode | None:
        return self.session.get(Episode, episode_id)

    def get_episode_with_trakt_id(self, trakt_id: int) -> Episode | None:
        stmt = select(Episode).where(episode_table.c.trakt_id == trakt_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_episode_id_for_trakt_id(self, trakt_id: int) -> int | None:
        stmt = select(episode_table.c.id).where(episode_table.c.trakt_id == trakt_id)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_episodes_in_season(self, season_id: int) -> list[Episode]:
        stmt = (
            select(Episode)
            .where(episode_table.c.season_id == season_id)
            .order_by(episode_table.c.number)
        )
        return list(self.session.execute(stmt).scalars())

    def get_show_seasons_with_episodes(self, show_id: int) -> list[SeasonWithEpisodes]:
        stmt = (
            select(Season)
            .where(season_table.c.show_id == show_id)
            .order_by(season_table.c.number)
        )
        seasons = list(self.session.execute(stmt).scalars())
        return [
            (season, self.get_episodes_in_season(cast("int", season.id))) for season in seasons
        ]

    def save_episode(self, episode: Episode) -> Episode:
        persisted = self.session.merge(episode)
        self.session.flush()
        return persisted

    def save_show_seasons(self, show_id: int, seasons: Sequence[SeasonWithEpisodes]) -> None:
        for season, episodes in seasons:
            persisted = self.session.merge(replace(season, show_id=show_id))
            self.session.flush()
            for episode in episodes:
                self.session.merge(replace(episode, season_id=persisted.id))
        self.session.flush()

    def delete_show_season_data(self, show_id: int) -> None:
        season_ids = select(season_table.c.id).where(season_table.c.show_id == show_id)
        episode_ids = select(episode_table.c.id).where(episode_table.c.season_id.in_(season_ids))
        self.session.execute(
            delete(EpisodeWatchEntry).where(episode_watch_entry_table.c.episode_id.in_(episode_ids))
        )
        self.session.execute(delete(Episode).where(episode_table.c.season_id.in_(season_ids)))
        self.session.execute(delete(Season).where(season_table.c.show_id == show_id))


class SqlAlchemyEpisodeWatchStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_episode_watch(self, watch_id: int) -> EpisodeWatchEntry | None:
        return self.session.get(EpisodeWatchEntry, watch_id)

    def get_watches_for_episode(self, episode_id: int) -> list[EpisodeWatchEntry]:
        stmt = (
            select(EpisodeWatchEntry)
            .where(episode_watch_entry_table.c.episode_id == episode_id)
            .order_by(episode_watch_entry_table.c.watched_at)
        )
        return list(self.session.execute(stmt).scalars())

    def get_entries_with_pending_action(
        self, show_id: int, action: PendingAction
    ) -> list[EpisodeWatchEntry]:
        stmt = self._show_entries(show_id).where(
            episode_watch_entry_table.c.pending_action == action
        )
        return list(self.session.execute(stmt).scalars())

    def has_episode_been_watched(self, episode_id: int) -> bool:
        stmt = select(
            exists()
            .where(episode_watch_entry_table.c.episode_id == episode_id)
            .where(episode_watch_entry_table.c.pending_action != PendingAction.DELETE)
        )
        return bool(self.session.execute(stmt).scalar())

    def save(self, entries: Sequence[EpisodeWatchEntry]) -> list[EpisodeWatchEntry]:
        persisted = [self.session.merge(entry) for entry in entries]
        self.session.flush()
        return persisted

    def upsert_remote_entries(self, entries: Sequence[EpisodeWatchEntry]) -> None:
        trakt_ids = [entry.trakt_id for entry in entries if entry.trakt_id is not None]
        existing = {
            entry.trakt_id: entry
            for entry in self._with_trakt_ids(trakt_ids)
            if entry.trakt_id is not None
        }
        seen: set[int] = set()
        for entry in entries:
            if entry.trakt_id is not None:
                if entry.trakt_id in seen:
                    continue
                seen.add(entry.trakt_id)
            current = existing.get(entry.trakt_id) if entry.trakt_id is not None else None
            if current is None:
                self.session.add(replace(entry, id=None, pending_action=PendingAction.NOTHING))
            elif not current.is_pending:
                current.episode_id = entry.episode_id
                current.watched_at = entry.watched_at
        self.session.flush()

    def delete_with_ids(self, ids: Sequence[int]) -> None:
        if not ids:
            return
        self.session.execute(
            delete(EpisodeWatchEntry).where(episode_watch_entry_table.c.id.in_(list(ids)))
        )

    def update_pending_action(self, ids: Sequence[int], action: PendingAction) -> None:
        if not ids:
            return
        self.session.execute(
            update(EpisodeWatchEntry)
            .where(episode_watch_entry_table.c.id.in_(list(ids)))
            .values(pending_action=action)
        )

    def sync_show_watch_entries(
        self, show_id: int, entries: Sequence[EpisodeWatchEntry]
    ) -> None:
        self._sync(list(self.session.execute(self._show_entries(show_id)).scalars()), entries)

    def sync_episode_watch_entries(
        self, episode_id: int, entries: Sequence[EpisodeWatchEntry]
    ) -> None:
        self._sync(self.get_watches_for_episode(episode_id), entries)

    def _sync(
        self,
        local: Sequence[EpisodeWatchEntry],
        remote: Sequence[EpisodeWatchEntry],
    ) -> None:
        """Diff ``remote`` against the reconciled ``local`` entries by Trakt history id.

        Matching entries are updated, unknown ones inserted and reconciled local entries
        the remote no longer reports are deleted. Pending entries are never touched and
        remote entries they already own are skipped.
        """

        reconciled = [entry for entry in local if not entry.is_pending]
        pending_trakt_ids = {
            entry.trakt_id for entry in local if entry.is_pending and entry.trakt_id is not None
        }
        by_trakt_id = {entry.trakt_id: entry for entry in reconciled if entry.trakt_id is not None}

        kept: set[int | None] = set()
        seen: set[int] = set()
        for entry in remote:
            if entry.trakt_id is not None:
                if entry.trakt_id in pending_trakt_ids or entry.trakt_id in seen:
                    continue
                seen.add(entry.trakt_id)
            current = by_trakt_id.get(entry.trakt_id) if entry.trakt_id is not None else None
            if current is None:
                self.session.add(replace(entry, id=None, pending_action=PendingAction.NOTHING))
                continue
            kept.add(current.id)
            current.episode_id = entry.episode_id
            current.watched_at = entry.watched_at

        stale = [entry.id for entry in reconciled if entry.id not in kept and entry.id is not None]
        self.delete_with_ids(stale)
        self.session.flush()

    def _show_entries(self, show_id: int) -> Select[tuple[EpisodeWatchEntry]]:
        return (
            select(EpisodeWatchEntry)
            .join(episode_table, episode_table.c.id == episode_watch_entry_table.c.episode_id)
            .join(season_table, season_table.c.id == episode_table.c.season_id)
            .where(season_table.c.show_id == show_id)
        )

    def _with_trakt_ids(self, trakt_ids: Sequence[int]) -> list[EpisodeWatchEntry]:
        if not trakt_ids:
            return []
        stmt = select(EpisodeWatchEntry).where(
            episode_watch_entry_table.c.trakt_id.in_(list(trakt_ids))
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyLastRequestStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_last_request(self, request: Request, entity_id: int) -> datetime | None:
        stmt = select(last_request_table.c.timestamp).where(
            last_request_table.c.request == request,
            last_request_table.c.entity_id == entity_id,
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def update_last_request(self, request: Request, entity_id: int, timestamp: datetime) -> None:
        stmt = select(LastRequest).where(
            last_request_table.c.request == request,
            last_request_table.c.entity_id == entity_id,
        )
        existing = self.session.execute(stmt).scalar_one_or_none()
        if existing is None:
            self.session.add(LastRequest(request=request, entity_id=entity_id, timestamp=timestamp))
        else:
            existing.timestamp = timestamp
        self.session.flush()


if TYPE_CHECKING:
    from episync.domain.ports import (
        EpisodeWatchStore,
        LastRequestStore,
        SeasonsEpisodesStore,
        ShowStore,
    )

    _session_stub = cast("Session", object())
    _show_check: ShowStore = SqlAlchemyShowStore(_session_stub)
    _seasons_check: SeasonsEpisodesStore = SqlAlchemySeasonsEpisodesStore(_session_stub)
    _watch_check: EpisodeWatchStore = SqlAlchemyEpisodeWatchStore(_session_stub)
    _last_request_check: LastRequestStore = SqlAlchemyLastRequestStore(_session_stub)

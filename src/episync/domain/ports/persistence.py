"""Ports for persisting seasons, episodes, watch entries and refresh markers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from episync.domain.model import (
        Episode,
        EpisodeWatchEntry,
        PendingAction,
        Request,
        Season,
        Show,
    )

type SeasonWithEpisodes = tuple[Season, Sequence[Episode]]


@runtime_checkable
class ShowStore(Protocol):
    """Lookup of provider ids for locally known shows."""

    def get(self, show_id: int) -> Show | None: ...

    def add(self, show: Show) -> Show: ...


@runtime_checkable
class SeasonsEpisodesStore(Protocol):
    """Persistence contract for season and episode metadata."""

    def get_season(self, season_id: int) -> Season | None: ...

    def get_season_with_trakt_id(self, trakt_id: int) -> Season | None: ...

    def get_episode(self, episode_id: int) -> Episode | None: ...

    def get_episode_with_trakt_id(self, trakt_id: int) -> Episode | None: ...

    def get_episode_id_for_trakt_id(self, trakt_id: int) -> int | None: ...

    def get_episodes_in_season(self, season_id: int) -> list[Episode]: ...

    def get_show_seasons_with_episodes(self, show_id: int) -> list[SeasonWithEpisodes]: ...

    def save_episode(self, episode: Episode) -> Episode: ...

    def save_show_seasons(self, show_id: int, seasons: Sequence[SeasonWithEpisodes]) -> None:
        """Upsert seasons and their episodes, wiring new episodes to their season."""
        ...

    def delete_show_season_data(self, show_id: int) -> None: ...


@runtime_checkable
class EpisodeWatchStore(Protocol):
    """Persistence contract for episode watch entries."""

    def get_episode_watch(self, watch_id: int) -> EpisodeWatchEntry | None: ...

    def get_watches_for_episode(self, episode_id: int) -> list[EpisodeWatchEntry]: ...

    def get_entries_with_pending_action(
        self, show_id: int, action: PendingAction
    ) -> list[EpisodeWatchEntry]: ...

    def has_episode_been_watched(self, episode_id: int) -> bool: ...

    def save(self, entries: Sequence[EpisodeWatchEntry]) -> list[EpisodeWatchEntry]: ...

    def upsert_remote_entries(self, entries: Sequence[EpisodeWatchEntry]) -> None:
        """Add or update entries keyed by their Trakt history id; never removes."""
        ...

    def delete_with_ids(self, ids: Sequence[int]) -> None: ...

    def update_pending_action(self, ids: Sequence[int], action: PendingAction) -> None: ...

    def sync_show_watch_entries(
        self, show_id: int, entries: Sequence[EpisodeWatchEntry]
    ) -> None:
        """Replace the show's non-pending entries with ``entries`` (diffed by Trakt id)."""
        ...

    def sync_episode_watch_entries(
        self, episode_id: int, entries: Sequence[EpisodeWatchEntry]
    ) -> None: ...


@runtime_checkable
class LastRequestStore(Protocol):
    """Persistence contract for last-successful-request markers."""

    def get_last_request(self, request: Request, entity_id: int) -> datetime | None: ...

    def update_last_request(
        self, request: Request, entity_id: int, timestamp: datetime
    ) -> None: ...

"""Ports for fetching remote metadata and watch history."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from episync.domain.model import Episode, EpisodeWatchEntry, Season
    from episync.domain.results import Result


@runtime_checkable
class SeasonsEpisodesDataSource(Protocol):
    """Remote source of a show's full season and episode tree."""

    def get_seasons_episodes(
        self, show_id: int
    ) -> Result[list[tuple[Season, list[Episode]]]]: ...


@runtime_checkable
class EpisodeDataSource(Protocol):
    """Remote source of a single episode's details."""

    def get_episode(
        self, show_id: int, season_number: int, episode_number: int
    ) -> Result[Episode]: ...


@runtime_checkable
class WatchHistorySource(Protocol):
    """Remote watch history of the authenticated user.

    Returned episodes carry provider ids only; returned watch entries carry no local
    episode id and must be resolved by the caller.
    """

    def get_show_episode_watches(
        self, show_id: int, since: datetime | None = None
    ) -> Result[list[tuple[Episode, EpisodeWatchEntry]]]: ...

    def get_episode_watches(
        self, episode_id: int, since: datetime | None = None
    ) -> Result[list[EpisodeWatchEntry]]: ...

    def add_episode_watches(self, entries: Sequence[EpisodeWatchEntry]) -> Result[None]: ...

    def remove_episode_watches(self, entries: Sequence[EpisodeWatchEntry]) -> Result[None]: ...


@runtime_checkable
class ExternalIdMapper(Protocol):
    """Translate a local id into a provider id (``None`` when unknown)."""

    def __call__(self, local_id: int) -> int | None: ...


__all__ = [
    "EpisodeDataSource",
    "ExternalIdMapper",
    "SeasonsEpisodesDataSource",
    "WatchHistorySource",
]

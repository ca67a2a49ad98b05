"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import (
    EpisodeDataSource,
    ExternalIdMapper,
    SeasonsEpisodesDataSource,
    WatchHistorySource,
)
from .persistence import (
    EpisodeWatchStore,
    LastRequestStore,
    SeasonsEpisodesStore,
    SeasonWithEpisodes,
    ShowStore,
)
from .session import AuthState
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "AuthState",
    "EpisodeDataSource",
    "EpisodeWatchStore",
    "ExternalIdMapper",
    "LastRequestStore",
    "RepositoryCollection",
    "SeasonWithEpisodes",
    "SeasonsEpisodesDataSource",
    "SeasonsEpisodesStore",
    "ShowStore",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
]

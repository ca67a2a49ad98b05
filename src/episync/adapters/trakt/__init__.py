"""Trakt adapter: season metadata, watch history and session state."""

from __future__ import annotations

from .client import TraktAPIError, TraktAuthError, TraktClient
from .fetcher import (
    TraktAuthState,
    TraktEpisodeSource,
    TraktSeasonsEpisodesSource,
    TraktWatchHistorySource,
)

__all__ = [
    "TraktAPIError",
    "TraktAuthError",
    "TraktAuthState",
    "TraktClient",
    "TraktEpisodeSource",
    "TraktSeasonsEpisodesSource",
    "TraktWatchHistorySource",
]

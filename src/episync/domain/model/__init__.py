"""Public domain model surface."""

from __future__ import annotations

from episync.domain.model.enums import ActionDate, PendingAction, Provider, RefreshType, Request
from episync.domain.model.tv import Episode, Season, Show
from episync.domain.model.watches import EpisodeWatchEntry, LastRequest

__all__ = [
    "ActionDate",
    "Episode",
    "EpisodeWatchEntry",
    "LastRequest",
    "PendingAction",
    "Provider",
    "RefreshType",
    "Request",
    "Season",
    "Show",
]

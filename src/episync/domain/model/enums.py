"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    TRAKT = "trakt"
    TMDB = "tmdb"


class PendingAction(StrEnum):
    """Outstanding remote reconciliation for a watch entry."""

    NOTHING = "nothing"
    UPLOAD = "upload"
    DELETE = "delete"


class Request(StrEnum):
    """Refresh scopes tracked by last-request records."""

    SHOW_SEASONS = "show_seasons"
    SHOW_EPISODE_WATCHES = "show_episode_watches"
    EPISODE_DETAILS = "episode_details"


class RefreshType(StrEnum):
    QUICK = "quick"
    FULL = "full"


class ActionDate(StrEnum):
    """Which timestamp to use when marking episodes as watched in bulk."""

    NOW = "now"
    AIR_DATE = "air_date"

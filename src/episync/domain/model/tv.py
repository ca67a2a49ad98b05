"""Show, season and episode metadata entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(kw_only=True)
class Show:
    """Local handle of a show and the ids each provider knows it by."""

    id: int | None = None
    trakt_id: int | None = None
    tmdb_id: int | None = None
    title: str | None = None


@dataclass(kw_only=True)
class Season:
    id: int | None = None
    show_id: int | None = None

    trakt_id: int | None = None
    tmdb_id: int | None = None
    tvdb_id: int | None = None

    number: int | None = None
    title: str | None = None
    summary: str | None = None
    network: str | None = None
    episode_count: int | None = None
    episodes_aired: int | None = None

    trakt_rating: float | None = None
    trakt_rating_votes: int | None = None

    tmdb_poster_path: str | None = None
    tmdb_backdrop_path: str | None = None


@dataclass(kw_only=True)
class Episode:
    id: int | None = None
    season_id: int | None = None

    trakt_id: int | None = None
    tmdb_id: int | None = None
    tvdb_id: int | None = None

    number: int | None = None
    title: str | None = None
    summary: str | None = None
    first_aired: datetime | None = None

    trakt_rating: float | None = None
    trakt_rating_votes: int | None = None

    tmdb_backdrop_path: str | None = None

    def has_aired(self, now: datetime) -> bool:
        return self.first_aired is not None and self.first_aired < now

"""Trakt API response schemas."""

from __future__ import annotations

import logging
from datetime import datetime  # noqa: TC003
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class TraktBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Trakt %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class TraktIds(TraktBaseModel):
    trakt: int | None = None
    tvdb: int | None = None
    tmdb: int | None = None
    imdb: str | None = None
    slug: str | None = None


class TraktEpisode(TraktBaseModel):
    season: int | None = None
    number: int | None = None
    title: str | None = None
    ids: TraktIds = Field(default_factory=TraktIds)
    overview: str | None = None
    rating: float | None = None
    votes: int | None = None
    first_aired: datetime | None = None


class TraktSeason(TraktBaseModel):
    number: int | None = None
    ids: TraktIds = Field(default_factory=TraktIds)
    title: str | None = None
    overview: str | None = None
    rating: float | None = None
    votes: int | None = None
    episode_count: int | None = None
    aired_episodes: int | None = None
    network: str | None = None
    episodes: list[TraktEpisode] = Field(default_factory=list)


class TraktHistoryShow(TraktBaseModel):
    title: str | None = None
    year: int | None = None
    ids: TraktIds = Field(default_factory=TraktIds)


class TraktHistoryItem(TraktBaseModel):
    id: int
    watched_at: datetime
    action: str | None = None
    type: str | None = None
    episode: TraktEpisode | None = None
    show: TraktHistoryShow | None = None


class TraktSyncCounts(TraktBaseModel):
    movies: int = 0
    episodes: int = 0


class TraktSyncResponse(TraktBaseModel):
    added: TraktSyncCounts | None = None
    deleted: TraktSyncCounts | None = None
    not_found: dict[str, object] | None = None


class TraktErrorResponse(TraktBaseModel):
    error: str | None = None
    error_description: str | None = None

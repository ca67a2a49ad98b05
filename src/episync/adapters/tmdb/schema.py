"""TMDb response schemas for TV metadata."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, field_validator

log = logging.getLogger(__name__)


class TmdbBaseModel(BaseModel):
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
            "TMDb %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class TmdbExternalIds(TmdbBaseModel):
    tvdb_id: int | None = None
    imdb_id: str | None = None


class TmdbEpisode(TmdbBaseModel):
    id: int
    name: str | None = None
    overview: str | None = None
    air_date: date | None = None
    season_number: int | None = None
    episode_number: int | None = None
    still_path: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None
    external_ids: TmdbExternalIds | None = None

    @field_validator("air_date", "overview", "name", mode="before")
    @classmethod
    def _blank_as_none(cls, value: object) -> object:
        # TMDb sends "" rather than null for unknown values
        if value == "":
            return None
        return value


class TmdbErrorResponse(TmdbBaseModel):
    status_code: int | None = None
    status_message: str | None = None

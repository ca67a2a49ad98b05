"""Translate TMDb payloads into domain entities."""

from __future__ import annotations

from datetime import UTC, datetime, time
from typing import TYPE_CHECKING

from episync.domain.model import Episode

if TYPE_CHECKING:
    from datetime import date

    from .schema import TmdbEpisode


def translate_episode(payload: TmdbEpisode) -> Episode:
    return Episode(
        tmdb_id=payload.id,
        tvdb_id=payload.external_ids.tvdb_id if payload.external_ids else None,
        number=payload.episode_number,
        title=payload.name,
        summary=payload.overview,
        first_aired=_air_datetime(payload.air_date),
        tmdb_backdrop_path=payload.still_path,
    )


def _air_datetime(value: date | None) -> datetime | None:
    # TMDb only knows the air date, so anchor it at midnight UTC
    if value is None:
        return None
    return datetime.combine(value, time.min, tzinfo=UTC)

"""Field-by-field merging of local records with provider variants.

Trakt is authoritative and TMDb secondary: for every shared field the first present value
in ``trakt -> tmdb -> local`` wins. Provider-specific fields only fall back to the local
value, and each provider's own id is kept independently. Ownership fields (local id,
parent id) always come from the local record.

An absent provider variant is passed as ``None`` and contributes nothing.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from episync.domain.model import Episode, Season


def first_present[T](*values: T | None) -> T | None:
    """Return the first value that is not ``None``."""

    for value in values:
        if value is not None:
            return value
    return None


def merge_season(local: Season, trakt: Season | None, tmdb: Season | None) -> Season:
    def pick(name: str) -> object:
        return first_present(_attr(trakt, name), _attr(tmdb, name), getattr(local, name))

    return replace(
        local,
        title=pick("title"),
        summary=pick("summary"),
        number=pick("number"),
        network=pick("network"),
        episode_count=pick("episode_count"),
        episodes_aired=pick("episodes_aired"),
        # Trakt specific
        trakt_id=first_present(_attr(trakt, "trakt_id"), local.trakt_id),
        trakt_rating=first_present(_attr(trakt, "trakt_rating"), local.trakt_rating),
        trakt_rating_votes=first_present(
            _attr(trakt, "trakt_rating_votes"), local.trakt_rating_votes
        ),
        # TMDb specific
        tmdb_id=first_present(_attr(tmdb, "tmdb_id"), _attr(trakt, "tmdb_id"), local.tmdb_id),
        tmdb_poster_path=first_present(_attr(tmdb, "tmdb_poster_path"), local.tmdb_poster_path),
        tmdb_backdrop_path=first_present(
            _attr(tmdb, "tmdb_backdrop_path"), local.tmdb_backdrop_path
        ),
        # cross reference
        tvdb_id=first_present(_attr(trakt, "tvdb_id"), _attr(tmdb, "tvdb_id"), local.tvdb_id),
    )


def merge_episode(local: Episode, trakt: Episode | None, tmdb: Episode | None) -> Episode:
    def pick(name: str) -> object:
        return first_present(_attr(trakt, name), _attr(tmdb, name), getattr(local, name))

    return replace(
        local,
        title=pick("title"),
        summary=pick("summary"),
        number=pick("number"),
        first_aired=pick("first_aired"),
        # Trakt specific
        trakt_id=first_present(_attr(trakt, "trakt_id"), local.trakt_id),
        trakt_rating=first_present(_attr(trakt, "trakt_rating"), local.trakt_rating),
        trakt_rating_votes=first_present(
            _attr(trakt, "trakt_rating_votes"), local.trakt_rating_votes
        ),
        # TMDb specific
        tmdb_id=first_present(_attr(tmdb, "tmdb_id"), _attr(trakt, "tmdb_id"), local.tmdb_id),
        tmdb_backdrop_path=first_present(
            _attr(tmdb, "tmdb_backdrop_path"), local.tmdb_backdrop_path
        ),
        # cross reference
        tvdb_id=first_present(_attr(trakt, "tvdb_id"), _attr(tmdb, "tvdb_id"), local.tvdb_id),
    )


def _attr(record: object | None, name: str) -> object | None:
    if record is None:
        return None
    return getattr(record, name)


__all__ = ["first_present", "merge_episode", "merge_season"]

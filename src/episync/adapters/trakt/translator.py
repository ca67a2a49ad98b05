"""Translate Trakt payloads into domain entities and back."""

from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING

from episync.domain.model import Episode, EpisodeWatchEntry, PendingAction, Season

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from .schema import TraktEpisode, TraktHistoryItem, TraktSeason


def translate_episode(payload: TraktEpisode) -> Episode:
    return Episode(
        trakt_id=payload.ids.trakt,
        tmdb_id=payload.ids.tmdb,
        tvdb_id=payload.ids.tvdb,
        number=payload.number,
        title=payload.title,
        summary=payload.overview,
        first_aired=_as_utc(payload.first_aired),
        trakt_rating=payload.rating,
        trakt_rating_votes=payload.votes,
    )


def translate_season(payload: TraktSeason) -> tuple[Season, list[Episode]]:
    season = Season(
        trakt_id=payload.ids.trakt,
        tmdb_id=payload.ids.tmdb,
        tvdb_id=payload.ids.tvdb,
        number=payload.number,
        title=payload.title,
        summary=payload.overview,
        network=payload.network,
        episode_count=payload.episode_count,
        episodes_aired=payload.aired_episodes,
        trakt_rating=payload.rating,
        trakt_rating_votes=payload.votes,
    )
    return season, [translate_episode(episode) for episode in payload.episodes]


def translate_history_item(item: TraktHistoryItem) -> tuple[Episode, EpisodeWatchEntry] | None:
    """Return the watched episode and its entry, or ``None`` for non-episode history."""

    if item.episode is None:
        return None
    entry = EpisodeWatchEntry(
        trakt_id=item.id,
        watched_at=_to_utc(item.watched_at),
        pending_action=PendingAction.NOTHING,
    )
    return translate_episode(item.episode), entry


def build_add_payload(watches: Iterable[tuple[int, datetime]]) -> dict[str, object]:
    """Body for ``POST /sync/history`` from ``(episode trakt id, watched_at)`` pairs."""

    return {
        "episodes": [
            {"watched_at": _iso(watched_at), "ids": {"trakt": trakt_id}}
            for trakt_id, watched_at in watches
        ]
    }


def build_remove_payload(history_ids: Iterable[int]) -> dict[str, object]:
    """Body for ``POST /sync/history/remove`` targeting single plays by history id."""

    return {"ids": sorted(set(history_ids))}


def _as_utc(value: datetime | None) -> datetime | None:
    return _to_utc(value) if value is not None else None


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _iso(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.000Z")

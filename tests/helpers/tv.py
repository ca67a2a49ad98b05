"""Builders and seeding helpers for show, season and episode tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from episync.domain.model import Episode, EpisodeWatchEntry, PendingAction, Season, Show

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from episync.domain.ports import SyncUnitOfWork

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def make_season(number: int = 1, *, trakt_id: int | None = None) -> Season:
    return Season(
        number=number,
        trakt_id=trakt_id if trakt_id is not None else 100 + number,
        title=f"Season {number}",
    )


def make_episode(
    number: int = 1,
    *,
    season_number: int = 1,
    trakt_id: int | None = None,
    first_aired: datetime | None = None,
) -> Episode:
    return Episode(
        number=number,
        trakt_id=trakt_id if trakt_id is not None else 1000 * season_number + number,
        title=f"Episode {season_number}x{number:02d}",
        first_aired=first_aired,
    )


def season_trakt_id(show_trakt_id: int, season_number: int) -> int:
    return show_trakt_id * 100 + season_number


def episode_trakt_id(show_trakt_id: int, season_number: int, number: int) -> int:
    return show_trakt_id * 10_000 + season_number * 100 + number


@dataclass(slots=True)
class SeededShow:
    show_id: int
    trakt_id: int
    season_ids: list[int] = field(default_factory=list)
    episode_ids: dict[tuple[int, int], int] = field(default_factory=dict)

    def episode(self, season_number: int, number: int) -> int:
        return self.episode_ids[(season_number, number)]


def seed_show(
    uow_factory: Callable[[], SyncUnitOfWork],
    *,
    trakt_id: int = 1390,
    tmdb_id: int | None = 1399,
    seasons: int = 1,
    episodes_per_season: int = 3,
    first_aired: datetime | None = None,
) -> SeededShow:
    """Store a show with aired episodes (unless ``first_aired`` says otherwise)."""

    aired = first_aired or NOW - timedelta(days=30)
    with uow_factory() as uow:
        show = uow.repositories.shows.add(
            Show(trakt_id=trakt_id, tmdb_id=tmdb_id, title="Example Show")
        )
        assert show.id is not None
        tree = [
            (
                make_season(season_number, trakt_id=season_trakt_id(trakt_id, season_number)),
                [
                    make_episode(
                        number,
                        season_number=season_number,
                        trakt_id=episode_trakt_id(trakt_id, season_number, number),
                        first_aired=aired + timedelta(days=7 * (number - 1)),
                    )
                    for number in range(1, episodes_per_season + 1)
                ],
            )
            for season_number in range(1, seasons + 1)
        ]
        uow.repositories.seasons_episodes.save_show_seasons(show.id, tree)
        uow.commit()
        seeded = SeededShow(show_id=show.id, trakt_id=trakt_id)
        for season, episodes in uow.repositories.seasons_episodes.get_show_seasons_with_episodes(
            show.id
        ):
            assert season.id is not None
            assert season.number is not None
            seeded.season_ids.append(season.id)
            for episode in episodes:
                assert episode.id is not None
                assert episode.number is not None
                seeded.episode_ids[(season.number, episode.number)] = episode.id
    return seeded


def add_watches(
    uow_factory: Callable[[], SyncUnitOfWork],
    episode_id: int,
    *entries: tuple[int | None, PendingAction],
    watched_at: datetime = NOW,
) -> list[EpisodeWatchEntry]:
    """Store watch entries for an episode from ``(trakt history id, pending action)`` pairs."""

    with uow_factory() as uow:
        saved = uow.repositories.episode_watches.save(
            [
                EpisodeWatchEntry(
                    episode_id=episode_id,
                    trakt_id=trakt_id,
                    watched_at=watched_at + timedelta(minutes=index),
                    pending_action=action,
                )
                for index, (trakt_id, action) in enumerate(entries)
            ]
        )
        uow.commit()
    return saved


def watches_for(
    uow_factory: Callable[[], SyncUnitOfWork], episode_id: int
) -> list[EpisodeWatchEntry]:
    with uow_factory() as uow:
        return uow.repositories.episode_watches.get_watches_for_episode(episode_id)


def actions(entries: Sequence[EpisodeWatchEntry]) -> list[PendingAction]:
    return [entry.pending_action for entry in entries]

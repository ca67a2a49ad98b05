"""In-memory fakes for the remote data source, watch history and session ports."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from episync.domain.results import ErrorResult, Success

from .tv import NOW

if TYPE_CHECKING:
    from collections.abc import Sequence

    from episync.domain.model import Episode, EpisodeWatchEntry, Season
    from episync.domain.results import Result


@dataclass
class FixedClock:
    now: datetime = NOW

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@dataclass
class FakeAuthState:
    authenticated: bool = True
    checks: int = 0

    def is_authenticated(self) -> bool:
        self.checks += 1
        return self.authenticated


@dataclass
class FakeSeasonsSource:
    result: Result[list[tuple[Season, list[Episode]]]] = field(
        default_factory=lambda: Success([])
    )
    calls: list[int] = field(default_factory=list)

    def get_seasons_episodes(self, show_id: int) -> Result[list[tuple[Season, list[Episode]]]]:
        self.calls.append(show_id)
        return self.result


@dataclass
class FakeEpisodeSource:
    result: Result[Episode] = field(default_factory=lambda: ErrorResult(reason="not configured"))
    error: Exception | None = None
    calls: list[tuple[int, int, int]] = field(default_factory=list)

    def get_episode(self, show_id: int, season_number: int, episode_number: int) -> Result[Episode]:
        self.calls.append((show_id, season_number, episode_number))
        if self.error is not None:
            raise self.error
        return self.result


@dataclass
class FakeWatchHistorySource:
    show_watches: Result[list[tuple[Episode, EpisodeWatchEntry]]] = field(
        default_factory=lambda: Success([])
    )
    episode_watches: Result[list[EpisodeWatchEntry]] = field(default_factory=lambda: Success([]))
    add_result: Result[None] = field(default_factory=lambda: Success(None))
    remove_result: Result[None] = field(default_factory=lambda: Success(None))

    show_calls: list[tuple[int, datetime | None]] = field(default_factory=list)
    episode_calls: list[int] = field(default_factory=list)
    added: list[EpisodeWatchEntry] = field(default_factory=list)
    removed: list[EpisodeWatchEntry] = field(default_factory=list)
    operations: list[str] = field(default_factory=list)

    def get_show_episode_watches(
        self, show_id: int, since: datetime | None = None
    ) -> Result[list[tuple[Episode, EpisodeWatchEntry]]]:
        self.show_calls.append((show_id, since))
        self.operations.append("fetch_show")
        return self.show_watches

    def get_episode_watches(
        self, episode_id: int, since: datetime | None = None
    ) -> Result[list[EpisodeWatchEntry]]:
        _ = since
        self.episode_calls.append(episode_id)
        self.operations.append("fetch_episode")
        return self.episode_watches

    def add_episode_watches(self, entries: Sequence[EpisodeWatchEntry]) -> Result[None]:
        self.operations.append("add")
        if isinstance(self.add_result, Success):
            self.added.extend(replace(entry) for entry in entries)
        return self.add_result

    def remove_episode_watches(self, entries: Sequence[EpisodeWatchEntry]) -> Result[None]:
        self.operations.append("remove")
        if isinstance(self.remove_result, Success):
            self.removed.extend(replace(entry) for entry in entries)
        return self.remove_result

    @property
    def mutations(self) -> list[str]:
        return [op for op in self.operations if op in {"add", "remove"}]

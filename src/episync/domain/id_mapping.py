"""Translate local ids into provider ids using the stored cross-references."""

from __future__ import annotations

from typing import TYPE_CHECKING

from episync.domain.model import Provider

if TYPE_CHECKING:
    from collections.abc import Callable

    from episync.domain.ports import SyncUnitOfWork


class ShowIdMapper:
    """Map a local show id to the id ``provider`` knows the show by."""

    def __init__(
        self, unit_of_work_factory: Callable[[], SyncUnitOfWork], provider: Provider
    ) -> None:
        self._uow = unit_of_work_factory
        self._provider = provider

    def __call__(self, local_id: int) -> int | None:
        with self._uow() as uow:
            show = uow.repositories.shows.get(local_id)
        if show is None:
            return None
        match self._provider:
            case Provider.TRAKT:
                return show.trakt_id
            case Provider.TMDB:
                return show.tmdb_id


class EpisodeTraktIdMapper:
    def __init__(self, unit_of_work_factory: Callable[[], SyncUnitOfWork]) -> None:
        self._uow = unit_of_work_factory

    def __call__(self, local_id: int) -> int | None:
        with self._uow() as uow:
            episode = uow.repositories.seasons_episodes.get_episode(local_id)
        return episode.trakt_id if episode is not None else None


__all__ = ["EpisodeTraktIdMapper", "ShowIdMapper"]

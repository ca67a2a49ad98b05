"""SQLAlchemy adapter package for episync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyEpisodeWatchStore,
    SqlAlchemyLastRequestStore,
    SqlAlchemySeasonsEpisodesStore,
    SqlAlchemyShowStore,
)
from .unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyEpisodeWatchStore",
    "SqlAlchemyLastRequestStore",
    "SqlAlchemySeasonsEpisodesStore",
    "SqlAlchemyShowStore",
    "SqlAlchemyUnitOfWork",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]

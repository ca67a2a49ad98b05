"""SQLAlchemy mapping metadata for the episync domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from episync.domain.model import (
    Episode,
    EpisodeWatchEntry,
    LastRequest,
    PendingAction,
    Request,
    Season,
    Show,
)

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

show_table = Table(
    "show",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("trakt_id", Integer, nullable=True, unique=True),
    Column("tmdb_id", Integer, nullable=True),
    Column("title", String, nullable=True),
)

season_table = Table(
    "season",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("show_id", Integer, nullable=False),
    Column("trakt_id", Integer, nullable=True, unique=True),
    Column("tmdb_id", Integer, nullable=True),
    Column("tvdb_id", Integer, nullable=True),
    Column("number", Integer, nullable=True),
    Column("title", String, nullable=True),
    Column("summary", String, nullable=True),
    Column("network", String, nullable=True),
    Column("episode_count", Integer, nullable=True),
    Column("episodes_aired", Integer, nullable=True),
    Column("trakt_rating", Float, nullable=True),
    Column("trakt_rating_votes", Integer, nullable=True),
    Column("tmdb_poster_path", String, nullable=True),
    Column("tmdb_backdrop_path", String, nullable=True),
    Index("ix_season_show_id", "show_id"),
)

episode_table = Table(
    "episode",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "season_id",
        Integer,
        ForeignKey("season.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("trakt_id", Integer, nullable=True, unique=True),
    Column("tmdb_id", Integer, nullable=True),
    Column("tvdb_id", Integer, nullable=True),
    Column("number", Integer, nullable=True),
    Column("title", String, nullable=True),
    Column("summary", String, nullable=True),
    Column("first_aired", UTCDateTime(), nullable=True),
    Column("trakt_rating", Float, nullable=True),
    Column("trakt_rating_votes", Integer, nullable=True),
    Column("tmdb_backdrop_path", String, nullable=True),
    Index("ix_episode_season_id", "season_id"),
)

episode_watch_entry_table = Table(
    "episode_watch_entry",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "episode_id",
        Integer,
        ForeignKey("episode.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("trakt_id", Integer, nullable=True, unique=True),
    Column("watched_at", UTCDateTime(), nullable=False),
    Column(
        "pending_action",
        Enum(PendingAction, native_enum=False, length=16),
        nullable=False,
        default=PendingAction.NOTHING,
    ),
    Index("ix_episode_watch_entry_episode_id", "episode_id"),
)

last_request_table = Table(
    "last_request",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("request", Enum(Request, native_enum=False, length=32), nullable=False),
    Column("entity_id", Integer, nullable=False),
    Column("timestamp", UTCDateTime(), nullable=False),
    UniqueConstraint("request", "entity_id", name="uq_last_request_scope"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Show, show_table)
    mapper_registry.map_imperatively(Season, season_table)
    mapper_registry.map_imperatively(Episode, episode_table)
    mapper_registry.map_imperatively(EpisodeWatchEntry, episode_watch_entry_table)
    mapper_registry.map_imperatively(LastRequest, last_request_table)

    configure_mappers()
    return mapper_registry


"""Initial schema: shows, seasons, episodes, watch entries and last requests.

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "show",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_show"),
        sa.UniqueConstraint("trakt_id", name="uq_show_show_trakt_id"),
    )
    op.create_table(
        "season",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("show_id", sa.Integer(), nullable=False),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("tvdb_id", sa.Integer(), nullable=True),
        sa.Column("number", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("summary", sa.String(), nullable=True),
        sa.Column("network", sa.String(), nullable=True),
        sa.Column("episode_count", sa.Integer(), nullable=True),
        sa.Column("episodes_aired", sa.Integer(), nullable=True),
        sa.Column("trakt_rating", sa.Float(), nullable=True),
        sa.Column("trakt_rating_votes", sa.Integer(), nullable=True),
        sa.Column("tmdb_poster_path", sa.String(), nullable=True),
        sa.Column("tmdb_backdrop_path", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_season"),
        sa.UniqueConstraint("trakt_id", name="uq_season_season_trakt_id"),
    )
    op.create_index("ix_season_show_id", "season", ["show_id"])
    op.create_table(
        "episode",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.Column("tmdb_id", sa.Integer(), nullable=True),
        sa.Column("tvdb_id", sa.Integer(), nullable=True),
        sa.Column("number", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("summary", sa.String(), nullable=True),
        sa.Column("first_aired", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trakt_rating", sa.Float(), nullable=True),
        sa.Column("trakt_rating_votes", sa.Integer(), nullable=True),
        sa.Column("tmdb_backdrop_path", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["season_id"],
            ["season.id"],
            name="fk_episode_season_id_season",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_episode"),
        sa.UniqueConstraint("trakt_id", name="uq_episode_episode_trakt_id"),
    )
    op.create_index("ix_episode_season_id", "episode", ["season_id"])
    op.create_table(
        "episode_watch_entry",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("episode_id", sa.Integer(), nullable=False),
        sa.Column("trakt_id", sa.Integer(), nullable=True),
        sa.Column("watched_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pending_action", sa.String(length=16), nullable=False),
        sa.ForeignKeyConstraint(
            ["episode_id"],
            ["episode.id"],
            name="fk_episode_watch_entry_episode_id_episode",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_episode_watch_entry"),
        sa.UniqueConstraint("trakt_id", name="uq_episode_watch_entry_episode_watch_entry_trakt_id"),
    )
    op.create_index(
        "ix_episode_watch_entry_episode_id", "episode_watch_entry", ["episode_id"]
    )
    op.create_table(
        "last_request",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("request", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_last_request"),
        sa.UniqueConstraint("request", "entity_id", name="uq_last_request_scope"),
    )


def downgrade() -> None:
    op.drop_table("last_request")
    op.drop_index("ix_episode_watch_entry_episode_id", table_name="episode_watch_entry")
    op.drop_table("episode_watch_entry")
    op.drop_index("ix_episode_season_id", table_name="episode")
    op.drop_table("episode")
    op.drop_index("ix_season_show_id", table_name="season")
    op.drop_table("season")
    op.drop_table("show")

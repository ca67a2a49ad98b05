"""Freshness defaults for remote synchronisation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING

from episync.domain.model import Request

from .env import optional_float_env_var

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_SEASONS_EXPIRY = timedelta(days=7)
DEFAULT_WATCHES_EXPIRY = timedelta(hours=1)


@dataclass(frozen=True, slots=True)
class SyncConfig:
    seasons_expiry: timedelta = DEFAULT_SEASONS_EXPIRY
    watches_expiry: timedelta = DEFAULT_WATCHES_EXPIRY
    extra_expiry: Mapping[Request, timedelta] = field(default_factory=dict)

    def expiry_overrides(self) -> dict[Request, timedelta]:
        return {
            Request.SHOW_SEASONS: self.seasons_expiry,
            Request.SHOW_EPISODE_WATCHES: self.watches_expiry,
            **self.extra_expiry,
        }


def get_sync_config() -> SyncConfig:
    seasons_hours = optional_float_env_var("EPISYNC_SEASONS_EXPIRY_HOURS")
    watches_minutes = optional_float_env_var("EPISYNC_WATCHES_EXPIRY_MINUTES")
    return SyncConfig(
        seasons_expiry=(
            timedelta(hours=seasons_hours) if seasons_hours is not None else DEFAULT_SEASONS_EXPIRY
        ),
        watches_expiry=(
            timedelta(minutes=watches_minutes)
            if watches_minutes is not None
            else DEFAULT_WATCHES_EXPIRY
        ),
    )

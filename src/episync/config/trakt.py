"""Trakt configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

TRAKT_BASE_URL = "https://api.trakt.tv"
TRAKT_API_VERSION = "2"


@dataclass(frozen=True)
class TraktConfig:
    """Holds Trakt API configuration values.

    ``access_token`` is optional; without it the application runs offline-only for watch
    history and every pending change is settled locally.
    """

    client_id: str
    access_token: str | None
    resilience: ResilienceConfig


def get_trakt_config(*, resilience: ResilienceConfig | None = None) -> TraktConfig:
    values = require_env_vars(("TRAKT_CLIENT_ID",))
    client_id = values["TRAKT_CLIENT_ID"]
    return TraktConfig(
        client_id=client_id,
        access_token=optional_env_var("TRAKT_ACCESS_TOKEN"),
        resilience=resilience
        or ResilienceConfig(
            name="trakt",
            base_url=TRAKT_BASE_URL,
            # Trakt allows 1000 GET calls per 5 minutes
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
            cache=CacheConfig(backend="sqlite"),
            default_headers={
                "Content-Type": "application/json",
                "trakt-api-version": TRAKT_API_VERSION,
                "trakt-api-key": client_id,
            },
        ),
    )

"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_http_cache_path,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config
from .tmdb import TmdbConfig, get_tmdb_config
from .trakt import TraktConfig, get_trakt_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "TmdbConfig",
    "TraktConfig",
    "configure_logging",
    "get_database_config",
    "get_http_cache_path",
    "get_storage_config",
    "get_sync_config",
    "get_tmdb_config",
    "get_trakt_config",
    "optional_env_var",
    "require_env_vars",
]

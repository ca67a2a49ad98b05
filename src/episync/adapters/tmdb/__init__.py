"""TMDb adapter: secondary episode metadata."""

from __future__ import annotations

from .client import TmdbAPIError, TmdbClient
from .fetcher import TmdbEpisodeSource

__all__ = ["TmdbAPIError", "TmdbClient", "TmdbEpisodeSource"]

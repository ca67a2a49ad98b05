"""Domain error types."""

from __future__ import annotations


class PreconditionError(LookupError):
    """Raised when an operation targets local data that must exist but does not.

    This indicates a caller bug (usually the metadata sync was never run), so it is
    propagated rather than degraded.
    """


class EpisodeNotFoundError(PreconditionError):
    def __init__(self, episode_id: int) -> None:
        super().__init__(f"No local episode with id {episode_id}")
        self.episode_id = episode_id


class SeasonNotFoundError(PreconditionError):
    def __init__(self, season_id: int | None) -> None:
        super().__init__(f"No local season with id {season_id}")
        self.season_id = season_id

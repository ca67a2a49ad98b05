"""User-facing watch history entities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from episync.domain.model.enums import PendingAction

if TYPE_CHECKING:
    from datetime import datetime

    from episync.domain.model.enums import Request


@dataclass(kw_only=True)
class EpisodeWatchEntry:
    """One instance of the user watching an episode.

    ``trakt_id`` is the history id assigned by Trakt; it stays ``None`` for entries that
    only exist locally. ``pending_action`` marks what still has to happen remotely before
    the entry is considered reconciled.
    """

    id: int | None = None
    episode_id: int | None = None
    trakt_id: int | None = None
    watched_at: datetime
    pending_action: PendingAction = PendingAction.NOTHING

    @property
    def is_pending(self) -> bool:
        return self.pending_action is not PendingAction.NOTHING


@dataclass(kw_only=True)
class LastRequest:
    """Wall-clock time of the last successful remote fetch for a refresh scope."""

    id: int | None = None
    request: Request
    entity_id: int
    timestamp: datetime

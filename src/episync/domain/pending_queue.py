"""Drain watch entries that still owe the remote service an upload or a deletion."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from episync.domain.model import PendingAction
from episync.domain.results import ErrorResult, Success

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from episync.domain.model import EpisodeWatchEntry
    from episync.domain.ports import AuthState, SyncUnitOfWork, WatchHistorySource

log = getLogger(__name__)


class PendingActionQueue:
    """Process pending DELETE entries, then pending UPLOAD entries.

    Deletes always go first so an entry the user flipped twice inside one drain cycle is
    never uploaded only to be removed again. Without a remote session both buckets are
    settled locally straight away. A failed remote call leaves the bucket pending for the
    next drain.
    """

    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], SyncUnitOfWork],
        watch_source: WatchHistorySource,
        auth_state: AuthState,
    ) -> None:
        self._uow = unit_of_work_factory
        self._watch_source = watch_source
        self._auth_state = auth_state

    def drain_show(self, show_id: int) -> bool:
        """Drain all pending entries of a show; return whether the remote was mutated."""

        with self._uow() as uow:
            store = uow.repositories.episode_watches
            to_delete = store.get_entries_with_pending_action(show_id, PendingAction.DELETE)
            to_upload = store.get_entries_with_pending_action(show_id, PendingAction.UPLOAD)
        return self._drain(to_delete, to_upload)

    def drain_episode(self, episode_id: int) -> bool:
        """Drain all pending entries of an episode; return whether the remote was mutated."""

        with self._uow() as uow:
            watches = uow.repositories.episode_watches.get_watches_for_episode(episode_id)
        to_delete = [w for w in watches if w.pending_action is PendingAction.DELETE]
        to_upload = [w for w in watches if w.pending_action is PendingAction.UPLOAD]
        return self._drain(to_delete, to_upload)

    def _drain(
        self,
        to_delete: Sequence[EpisodeWatchEntry],
        to_upload: Sequence[EpisodeWatchEntry],
    ) -> bool:
        mutated = False
        if to_delete and self.process_pending_deletes(to_delete):
            mutated = True
        if to_upload and self.process_pending_additions(to_upload):
            mutated = True
        return mutated

    def process_pending_deletes(self, entries: Sequence[EpisodeWatchEntry]) -> bool:
        """Delete entries remotely (when possible) and locally.

        Returns ``True`` if a network service was updated.
        """

        if not self._auth_state.is_authenticated():
            self._delete_local(_ids(entries))
            return False

        # Entries without a history id cannot be targeted remotely, only locally
        local_only = [entry for entry in entries if entry.trakt_id is None]
        if local_only:
            self._delete_local(_ids(local_only))
        remote = [entry for entry in entries if entry.trakt_id is not None]
        if not remote:
            return False

        ids = _ids(remote)
        match self._watch_source.remove_episode_watches(remote):
            case Success():
                self._delete_local(ids)
                log.info("Removed %s watch entries remotely", len(ids))
                return True
            case ErrorResult(reason=reason):
                log.warning("Remote removal of %s watch entries failed: %s", len(ids), reason)
                return False

    def process_pending_additions(self, entries: Sequence[EpisodeWatchEntry]) -> bool:
        """Upload entries (when possible) and mark them as reconciled.

        Returns ``True`` if a network service was updated.
        """

        ids = _ids(entries)
        if not self._auth_state.is_authenticated():
            self._mark_reconciled(ids)
            return False

        match self._watch_source.add_episode_watches(entries):
            case Success():
                self._mark_reconciled(ids)
                log.info("Uploaded %s watch entries", len(ids))
                return True
            case ErrorResult(reason=reason):
                log.warning("Upload of %s watch entries failed: %s", len(ids), reason)
                return False

    def _delete_local(self, ids: list[int]) -> None:
        with self._uow() as uow:
            uow.repositories.episode_watches.delete_with_ids(ids)
            uow.commit()

    def _mark_reconciled(self, ids: list[int]) -> None:
        with self._uow() as uow:
            uow.repositories.episode_watches.update_pending_action(ids, PendingAction.NOTHING)
            uow.commit()


def _ids(entries: Sequence[EpisodeWatchEntry]) -> list[int]:
    return [entry.id for entry in entries if entry.id is not None]


__all__ = ["PendingActionQueue"]

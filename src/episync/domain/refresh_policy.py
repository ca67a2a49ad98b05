"""Decide whether a remote fetch is due for a refresh scope."""

from __future__ import annotations

from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

from episync.domain.clock import Clock, ensure_aware, utcnow
from episync.domain.model import Request

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from datetime import datetime

    from episync.domain.ports import SyncUnitOfWork

log = getLogger(__name__)

DEFAULT_EXPIRY: Final[Mapping[Request, timedelta]] = {
    Request.SHOW_SEASONS: timedelta(days=7),
    Request.SHOW_EPISODE_WATCHES: timedelta(hours=1),
    Request.EPISODE_DETAILS: timedelta(days=7),
}


class RefreshPolicy:
    """Staleness checks backed by the last-request store.

    A scope is stale when it has never been fetched successfully or when its last
    successful fetch is older than the cutoff. The cutoff is either an explicit instant or
    ``now - expiry``; without either, the per-request default expiry applies.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], SyncUnitOfWork],
        *,
        clock: Clock = utcnow,
        default_expiry: Mapping[Request, timedelta] | None = None,
    ) -> None:
        self._uow = unit_of_work_factory
        self._clock = clock
        self._default_expiry = {**DEFAULT_EXPIRY, **(default_expiry or {})}

    def now(self) -> datetime:
        return self._clock()

    def is_stale(
        self,
        request: Request,
        entity_id: int,
        *,
        expiry: timedelta | None = None,
        cutoff: datetime | None = None,
    ) -> bool:
        if cutoff is None:
            cutoff = self.now() - (expiry if expiry is not None else self._default_expiry[request])
        cutoff = ensure_aware(cutoff)
        last = self._last_request(request, entity_id)
        if last is None:
            return True
        return last < cutoff

    def has_been_requested(self, request: Request, entity_id: int) -> bool:
        return self._last_request(request, entity_id) is not None

    def record_success(
        self,
        request: Request,
        entity_id: int,
        timestamp: datetime | None = None,
    ) -> None:
        when = ensure_aware(timestamp) if timestamp is not None else self.now()
        with self._uow() as uow:
            uow.repositories.last_requests.update_last_request(request, entity_id, when)
            uow.commit()
        log.debug("Recorded %s success for %s at %s", request, entity_id, when)

    def _last_request(self, request: Request, entity_id: int) -> datetime | None:
        with self._uow() as uow:
            return uow.repositories.last_requests.get_last_request(request, entity_id)


__all__ = ["DEFAULT_EXPIRY", "RefreshPolicy"]

"""Result variants returned by remote data sources."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Success[T]:
    """A remote call that produced data.

    ``response_modified`` is ``False`` when the provider signalled that nothing changed
    since the previous fetch (for example a revalidated cache hit).
    """

    data: T
    response_modified: bool = True


@dataclass(frozen=True, slots=True)
class ErrorResult:
    """A remote call that failed; the local store stays authoritative."""

    reason: str
    error: BaseException | None = None


type Result[T] = Success[T] | ErrorResult


__all__ = ["ErrorResult", "Result", "Success"]

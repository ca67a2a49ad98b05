"""Port for the remote session state."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class AuthState(Protocol):
    """Reports whether a remote session is available; polled before each remote call."""

    def is_authenticated(self) -> bool: ...

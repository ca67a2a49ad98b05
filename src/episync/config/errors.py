"""Errors raised while reading episync settings from the environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """An environment setting is present but unusable.

    ``names`` lists the offending environment variables so callers can point the user at them.
    """

    def __init__(self, message: str, *, names: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.names = tuple(names)


class MissingConfigurationError(ConfigurationError):
    """Required settings (API keys, OAuth credentials) are unset or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        missing = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(missing)}", names=missing)

"""Errors raised while resolving sync settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting has a value the sync cannot work with.

    ``setting`` names the offending environment variable or field when known.
    """

    def __init__(self, message: str, *, setting: str | None = None) -> None:
        super().__init__(message)
        self.setting = setting


class MissingConfigurationError(ConfigurationError):
    def __init__(self, names: list[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")

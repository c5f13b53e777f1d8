"""Domain error hierarchy."""

from __future__ import annotations


class SakoraError(Exception):
    """Base class for errors raised by the membership sync."""


class TargetNotFoundError(SakoraError, LookupError):
    """Raised by the course management store when a container or membership is unknown."""

    def __init__(self, kind: str, key: str, *, detail: str | None = None) -> None:
        self.kind = kind
        self.key = key
        message = f"No {kind} found with id {key}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

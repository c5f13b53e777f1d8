"""Environment variable loaders for configuration.

Unset and blank values are treated alike: both fall back to the default.
"""

from __future__ import annotations

import os

from .errors import ConfigurationError

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _raw(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_str(name: str, default: str) -> str:
    value = _raw(name)
    return default if value is None else value


def env_bool(name: str, *, default: bool = False) -> bool:
    value = _raw(name)
    if value is None:
        return default
    normalized = value.lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}", setting=name)


def env_int(name: str, default: int) -> int:
    value = _raw(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}", setting=name) from exc


def env_list(name: str) -> frozenset[str] | None:
    """Parse a comma separated value; ``None`` when unset, empty items dropped."""

    value = _raw(name)
    if value is None:
        return None
    return frozenset(item.strip() for item in value.split(",") if item.strip())

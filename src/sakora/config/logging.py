"""Logging setup for the command line."""

from __future__ import annotations

import logging
from typing import Final

# Alembic announces its context and every no-op upgrade at INFO on each start.
NOISY_LOGGERS: Final[tuple[str, ...]] = ("alembic.runtime.migration", "alembic.env")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    Outside debug runs the migration loggers are held at WARNING. ``force``
    replaces handlers that are already installed.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)

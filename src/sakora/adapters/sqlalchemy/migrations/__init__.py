"""Packaged Alembic migrations for the SQLite (or other SQLAlchemy) backing store."""

from __future__ import annotations

from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory

from sakora.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

log = getLogger(__name__)


def alembic_config(*, database_uri: str | None = None) -> Config:
    """Alembic config bound to the scripts shipped inside the package.

    Building it in code keeps migrations working from an installed wheel where
    no ``alembic.ini`` or ``pyproject.toml`` is around.
    """

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_PATH))
    if database_uri is not None:
        config.set_main_option("sqlalchemy.url", database_uri)
    return config


def head_revision() -> str | None:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


def current_revision(connection: Connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema up to the newest revision.

    With ``engine`` the upgrade runs on one of its connections, which is what
    in-memory SQLite databases need; otherwise Alembic opens its own engine for
    ``database_uri`` (or the configured database).
    """

    if engine is None:
        config = alembic_config(database_uri=database_uri or get_database_config().uri)
        command.upgrade(config, "head")
        log.debug("Database schema upgraded to %s", head_revision())
        return

    config = alembic_config()
    with engine.begin() as connection:
        before = current_revision(connection)
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
        after = current_revision(connection)
    if before != after:
        log.info("Upgraded database schema from %s to %s", before or "<empty>", after)

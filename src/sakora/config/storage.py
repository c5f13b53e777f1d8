"""Where the shadow ledger database lives."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_bool, env_str

APP_DIR_NAME: Final[str] = "sakora"
DEFAULT_DB_FILENAME: Final[str] = "sakora.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Local data directory holding the SQLite database."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str
    echo: bool = False


def _platform_data_home() -> Path:
    if os.name == "nt":
        local_app_data = os.getenv("LOCALAPPDATA")
        return Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
    xdg_data_home = os.getenv("XDG_DATA_HOME")
    return Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    explicit = os.getenv("SAKORA_DATA_DIR")
    data_dir = Path(explicit) if explicit else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(
        data_dir=data_dir,
        database_filename=env_str("SAKORA_DB_FILENAME", DEFAULT_DB_FILENAME),
    )


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """Resolve the database URI.

    ``DATABASE_URI`` wins; otherwise a SQLite file in the data directory is used
    (and the directory is created).
    """

    echo = env_bool("SAKORA_SQL_ECHO")
    uri = os.getenv("DATABASE_URI")
    if not uri:
        uri = (storage or get_storage_config()).database_uri()
    return DatabaseConfig(uri=uri, echo=echo)

"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_int, env_list, env_str
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .memberships import MembershipSyncConfig, get_membership_sync_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MembershipSyncConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_bool",
    "env_int",
    "env_list",
    "env_str",
    "get_database_config",
    "get_membership_sync_config",
    "get_storage_config",
]

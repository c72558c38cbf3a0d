"""Settings for storagedb.

Read from ``STORAGEDB_*`` environment variables and a ``.env`` file.

Examples:
    >>> settings = StorageDbSettings(storage="in_memory")
    >>> settings.database_config()
    {'storage': 'in_memory'}
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storagedb.storage.base import ApplyStrategy, StorageBackendKind, apply_strategy


class StorageDbSettings(BaseSettings):
    """Defaults for the CLI and the storage database factory.

    Fields
    ──────
    log_level     : Structlog log level
    json_logs     : Force JSON (True) or console (False) logs; auto when unset
    storage       : Backend of the default storage database
    storage_dir   : Directory of the ``json_file`` backend
    database_name : Name of the default storage database
    sqlite_path   : SQLite file backing the ``sqlite`` backend (memory when unset)
    """

    model_config = SettingsConfigDict(
        env_prefix="STORAGEDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Storage ──────────────────────────────────────────────────
    storage: StorageBackendKind = StorageBackendKind.JSON_FILE
    storage_dir: Path = Field(
        default_factory=lambda: Path.home() / ".storagedb",
        description="Directory of the json_file storage",
    )
    database_name: str = "storage"
    sqlite_path: Path | None = None

    def database_config(self, sql_database: str = "sql") -> dict[str, Any]:
        """Factory config for the default storage database."""
        config: dict[str, Any] = {"storage": self.storage.value}
        if self.storage is StorageBackendKind.JSON_FILE:
            config["dir"] = str(self.storage_dir)
        elif apply_strategy(self.storage) is ApplyStrategy.DELEGATE:
            config["database"] = sql_database
        return config


@lru_cache(maxsize=1)
def get_settings() -> StorageDbSettings:
    """Cached settings instance."""
    return StorageDbSettings()


__all__ = [
    "StorageDbSettings",
    "get_settings",
]

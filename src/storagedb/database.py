"""Named databases.

``StorageDatabase`` exposes a record storage under the generic named
database contract; ``SqlDatabase`` does the same for a SQL adapter so
other databases can reference it by name.
"""

from __future__ import annotations

from typing import Any

from storagedb.adapters.base import DatabaseAdapter
from storagedb.dialect import Dialect
from storagedb.protocols import Connection, StorageInterface


class StorageDatabase:
    """A record storage as a named database."""

    def __init__(self, storage: StorageInterface, name: str = "storage"):
        self._storage = storage
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def connection(self) -> StorageInterface:
        return self._storage

    def parameter(self, name: str, default: Any = None) -> Any:
        """Always ``default``: storage databases carry no parameters."""
        return default

    def storage(self) -> StorageInterface:
        return self._storage

    def __repr__(self) -> str:
        return f"StorageDatabase(name={self._name!r}, storage={self._storage!r})"


class SqlDatabase:
    """A SQL database adapter as a named database."""

    def __init__(self, adapter: DatabaseAdapter, name: str = "sql"):
        self._adapter = adapter
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    def connection(self) -> Connection:
        return self._adapter.get_connection()

    def parameter(self, name: str, default: Any = None) -> Any:
        return default

    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    def __repr__(self) -> str:
        return f"SqlDatabase(name={self._name!r}, adapter={self._adapter!r})"


__all__ = [
    "StorageDatabase",
    "SqlDatabase",
]

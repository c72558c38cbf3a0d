"""Named database registry.

Holds the databases of an application by name. Storage databases that sit
on top of a SQL database resolve it here.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from storagedb.errors import DatabaseNotFoundError
from storagedb.logging import get_logger
from storagedb.protocols import DatabaseInterface

logger = get_logger(__name__)

DatabaseFactory = Callable[[str, Mapping[str, Any]], DatabaseInterface]


class Databases:
    """
    Registry of named databases.

    Databases are added directly or registered lazily with a factory and
    its config; lazy databases are created on first :meth:`get`.

    Usage:
        databases = Databases()
        databases.add(SqlDatabase(SQLiteAdapter("app.db"), name="sql"))
        factory = StorageDatabaseFactory(databases)
        databases.register("storage", factory.create_database, {"storage": "sqlite", "database": "sql"})
        databases.get("storage")
    """

    def __init__(self, *databases: DatabaseInterface):
        self._databases: dict[str, DatabaseInterface] = {}
        self._lazy: dict[str, tuple[DatabaseFactory, Mapping[str, Any]]] = {}
        for database in databases:
            self.add(database)

    def add(self, database: DatabaseInterface) -> Databases:
        """Add (or replace) a database under its own name."""
        self._lazy.pop(database.name, None)
        self._databases[database.name] = database
        return self

    def register(
        self,
        name: str,
        factory: DatabaseFactory,
        config: Mapping[str, Any] | None = None,
    ) -> Databases:
        """Register a database created by ``factory(name, config)`` on first use."""
        self._databases.pop(name, None)
        self._lazy[name] = (factory, dict(config or {}))
        return self

    def get(self, name: str) -> DatabaseInterface:
        """Get a database by name.

        Raises:
            DatabaseNotFoundError: If no database is registered under ``name``.
        """
        if name in self._databases:
            return self._databases[name]
        if name in self._lazy:
            factory, config = self._lazy[name]
            database = factory(name, config)
            del self._lazy[name]
            self._databases[name] = database
            logger.debug("databases.created", database=name)
            return database
        raise DatabaseNotFoundError(name)

    def has(self, name: str) -> bool:
        return name in self._databases or name in self._lazy

    def names(self) -> list[str]:
        return sorted({*self._databases, *self._lazy})

    def __len__(self) -> int:
        return len(self.names())

    def __iter__(self) -> Iterator[DatabaseInterface]:
        return iter([self.get(name) for name in self.names()])


__all__ = [
    "Databases",
]

"""Storage database factory.

Builds a :class:`~storagedb.database.StorageDatabase` from a config mapping:

==========  ==============================================================
key         meaning
==========  ==============================================================
storage     backend identifier (``StorageBackendKind`` or its value); required
dir         directory of the ``json_file`` storage
database    name of a registered SQL database (``sqlite``/``mysql``/``mariadb``)
tables      optional ``{table: {"columns": [...], "primary_key": "id"}}``
==========  ==============================================================

Usage:
    factory = StorageDatabaseFactory(databases)
    db = factory.create_database("files", {"storage": "json_file", "dir": "data/"})
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, assert_never

from storagedb.database import StorageDatabase
from storagedb.errors import InvalidConfigError, MissingConfigError
from storagedb.logging import get_logger
from storagedb.protocols import SqlDatabaseInterface
from storagedb.registry import Databases
from storagedb.storage import InMemoryStorage, JsonFileStorage, SqlStorage, StorageBackendKind, Tables

logger = get_logger(__name__)


class StorageDatabaseFactory:
    """Creates storage databases; SQL references resolve against ``databases``."""

    def __init__(self, databases: Databases | None = None):
        self._databases = databases if databases is not None else Databases()

    @property
    def databases(self) -> Databases:
        return self._databases

    def create_database(self, name: str, config: Mapping[str, Any] | None = None) -> StorageDatabase:
        """Create a new storage database based on the configuration.

        Raises:
            MissingConfigError: ``storage``, ``dir`` or ``database`` missing
            InvalidConfigError: unknown backend, non-SQL or mismatched
                ``database``, malformed ``tables``
            DatabaseNotFoundError: ``database`` is not registered
        """
        config = config or {}

        if config.get("storage") is None:
            raise MissingConfigError(
                "storage", f'Database "{name}": missing "storage" config.'
            ).with_context(database=name)

        kind = self._backend_kind(name, config["storage"])
        tables = self._tables(name, config.get("tables"))

        match kind:
            case StorageBackendKind.JSON_FILE:
                if config.get("dir") is None:
                    raise MissingConfigError(
                        "dir", f'Database "{name}": missing "dir" config.'
                    ).with_context(database=name, backend=kind.value)
                storage = JsonFileStorage(dir=config["dir"], tables=tables)

            case StorageBackendKind.IN_MEMORY:
                storage = InMemoryStorage(tables=tables)

            case StorageBackendKind.SQLITE | StorageBackendKind.MYSQL | StorageBackendKind.MARIADB:
                storage = SqlStorage(self._sql_adapter(name, kind, config), tables=tables)

            case _:
                assert_never(kind)

        logger.info("storage_database.created", database=name, backend=kind.value)
        return StorageDatabase(storage, name)

    def _backend_kind(self, name: str, value: Any) -> StorageBackendKind:
        try:
            return StorageBackendKind(value)
        except (ValueError, TypeError):
            raise InvalidConfigError(
                "storage",
                value,
                f'Database "{name}": could not create storage database for storage {value!r}. '
                f"Supported: {[k.value for k in StorageBackendKind]}",
            ).with_context(database=name) from None

    def _sql_adapter(self, name: str, kind: StorageBackendKind, config: Mapping[str, Any]):
        reference = config.get("database")
        if reference is None:
            raise MissingConfigError(
                "database", f'Database "{name}": missing "database" config.'
            ).with_context(database=name, backend=kind.value)

        database = self._databases.get(reference)

        if not isinstance(database, SqlDatabaseInterface):
            raise InvalidConfigError(
                "database",
                reference,
                f'Database "{name}": storage "database" config needs to be a SQL database.',
            ).with_context(database=name, backend=kind.value)

        adapter = database.adapter()
        if adapter.db_type.value != kind.value:
            raise InvalidConfigError(
                "database",
                reference,
                f'Database "{name}": storage {kind.value!r} cannot use '
                f'{adapter.db_type.value!r} database "{reference}".',
            ).with_context(database=name, backend=kind.value)
        return adapter

    def _tables(self, name: str, raw: Any) -> Tables:
        tables = Tables()
        if raw is None:
            return tables
        if not isinstance(raw, Mapping):
            raise InvalidConfigError("tables", raw, f'Database "{name}": "tables" must be a mapping.')

        for table, spec in raw.items():
            columns = spec.get("columns", []) if isinstance(spec, Mapping) else None
            if not isinstance(columns, (list, tuple)):
                raise InvalidConfigError(
                    f"tables.{table}",
                    spec,
                    f'Database "{name}": table "{table}" needs a "columns" list.',
                )
            tables.add(table, columns, primary_key=spec.get("primary_key"))
        return tables


__all__ = [
    "StorageDatabaseFactory",
]

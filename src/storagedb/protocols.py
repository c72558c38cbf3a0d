"""
Canonical protocol definitions for storagedb.

Every module that needs a Connection, a storage or a named database
depends on the shapes defined here, never on concrete classes.

Architecture:
    ::

        protocols.py
        ├── Connection                — DB-API connection (sqlite3, mysql.connector)
        ├── StorageInterface          — record storage: count/store/fetch/delete/transaction
        ├── SqlCapableStorage         — storage that can hand out its DatabaseAdapter
        ├── DatabaseInterface         — named database: name/connection/parameter
        ├── StorageDatabaseInterface  — database exposing a StorageInterface
        ├── SqlDatabaseInterface      — database exposing a DatabaseAdapter
        └── ProcessorInterface        — applies Table definitions to databases

    Consumers:
        storage/*, database.py, factory.py, processors/*

Guardrails:
    ❌ DON'T: ``isinstance(storage, JsonFileStorage)`` in processors
    ✅ DO: Depend on the capability protocol (``SqlCapableStorage``)
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from storagedb.adapters.base import DatabaseAdapter
    from storagedb.processors.actions import ApplyAction
    from storagedb.schema.table import Table
    from storagedb.storage.base import StorageBackendKind
    from storagedb.storage.tables import Tables

Record = dict[str, Any]


# ---------------------------------------------------------------------------
# Database Connection Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Connection(Protocol):
    """Minimal SYNCHRONOUS DB-API connection.

    Satisfied by ``sqlite3.Connection`` and ``mysql.connector`` connections.
    """

    def cursor(self) -> Any:
        """Open a cursor."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


# ---------------------------------------------------------------------------
# Storage Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class StorageInterface(Protocol):
    """
    Record-level storage consumed by the schema processors.

    Operations:
        count(table)              → number of records, TableNotFoundError if missing
        store_items(table, items) → replace the table's records
        fetch_items(table)        → all records in stored order
        delete_table(table)       → remove records and registration
        transaction()             → commit on exit, rollback on exception
    """

    @property
    def kind(self) -> StorageBackendKind:
        """Backend identifier."""
        ...

    @property
    def tables(self) -> Tables:
        """Registered table schemas."""
        ...

    def count(self, table: str) -> int: ...

    def store_items(self, table: str, items: Sequence[Record]) -> list[Record]: ...

    def fetch_items(self, table: str) -> list[Record]: ...

    def delete_table(self, table: str) -> None: ...

    def transaction(self) -> AbstractContextManager[Any]: ...


@runtime_checkable
class SqlCapableStorage(Protocol):
    """Capability: storage backed by a SQL database adapter."""

    def database_adapter(self) -> DatabaseAdapter:
        """Return the adapter holding the SQL connection."""
        ...


# ---------------------------------------------------------------------------
# Database Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class DatabaseInterface(Protocol):
    """A named database connection as consumed by the outer system."""

    @property
    def name(self) -> str: ...

    def connection(self) -> Any: ...

    def parameter(self, name: str, default: Any = None) -> Any: ...


@runtime_checkable
class StorageDatabaseInterface(DatabaseInterface, Protocol):
    """Database exposing a record storage."""

    def storage(self) -> StorageInterface: ...


@runtime_checkable
class SqlDatabaseInterface(DatabaseInterface, Protocol):
    """Database exposing a SQL database adapter."""

    def adapter(self) -> DatabaseAdapter: ...


# ---------------------------------------------------------------------------
# Processor Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ProcessorInterface(Protocol):
    """Applies a table definition to a database."""

    def supports_database(self, database: DatabaseInterface) -> bool: ...

    def process(self, table: Table, database: DatabaseInterface) -> ApplyAction: ...


__all__ = [
    "Record",
    "Connection",
    "StorageInterface",
    "SqlCapableStorage",
    "DatabaseInterface",
    "StorageDatabaseInterface",
    "SqlDatabaseInterface",
    "ProcessorInterface",
]

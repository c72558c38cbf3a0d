"""
storagedb - apply table definitions to storage databases.

A storage database wraps a record storage (JSON files, memory, or a SQL
table set) under a named database contract. Table definitions are
created, seeded and dropped through :class:`StorageDatabaseProcessor`.

Examples:
    >>> from storagedb import InMemoryStorage, StorageDatabase, StorageDatabaseProcessor, Table
    >>> database = StorageDatabase(InMemoryStorage())
    >>> StorageDatabaseProcessor().process(Table("users").with_items([{"name": "John"}]), database)
    <ApplyAction.SEEDED: 'seeded'>
"""

__version__ = "0.1.0"

from storagedb.database import SqlDatabase, StorageDatabase
from storagedb.errors import (
    ApplyError,
    ConfigurationError,
    DatabaseNotFoundError,
    InvalidConfigError,
    MissingConfigError,
    SchemaError,
    StorageDbError,
    StorageError,
    TableNotFoundError,
    UnsupportedBackendError,
)
from storagedb.factory import StorageDatabaseFactory
from storagedb.processors import ApplyAction, SqlTableProcessor, StorageDatabaseProcessor, merge_items
from storagedb.registry import Databases
from storagedb.schema import Column, ColumnType, Table, load_tables, parse_tables
from storagedb.storage import (
    ApplyStrategy,
    InMemoryStorage,
    JsonFileStorage,
    SqlStorage,
    StorageBackendKind,
    Tables,
    apply_strategy,
)

__all__ = [
    "__version__",
    # databases
    "StorageDatabase",
    "SqlDatabase",
    "Databases",
    "StorageDatabaseFactory",
    # storages
    "StorageBackendKind",
    "ApplyStrategy",
    "apply_strategy",
    "InMemoryStorage",
    "JsonFileStorage",
    "SqlStorage",
    "Tables",
    # schema
    "Table",
    "Column",
    "ColumnType",
    "load_tables",
    "parse_tables",
    # processors
    "ApplyAction",
    "StorageDatabaseProcessor",
    "SqlTableProcessor",
    "merge_items",
    # errors
    "StorageDbError",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "DatabaseNotFoundError",
    "UnsupportedBackendError",
    "SchemaError",
    "ApplyError",
    "StorageError",
    "TableNotFoundError",
]

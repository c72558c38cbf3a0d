"""Record storages.

Architecture::

    BaseStorage (base.py)             transaction() + record preparation
        |-- InMemoryStorage           process-local dicts
        |-- JsonFileStorage           <dir>/<table>.json files
        |-- SqlStorage                rows of an existing SQL table

    StorageBackendKind (base.py)      closed enum of backends
    apply_strategy (base.py)          kind -> DIRECT | DELEGATE
    Tables (tables.py)                table name -> columns + primary key
"""

from .base import ApplyStrategy, BaseStorage, StorageBackendKind, apply_strategy, describe_backends
from .json_file import JsonFileStorage
from .memory import InMemoryStorage
from .sql import SqlStorage
from .tables import Tables, TableSchema

__all__ = [
    "StorageBackendKind",
    "ApplyStrategy",
    "apply_strategy",
    "describe_backends",
    "BaseStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "SqlStorage",
    "Tables",
    "TableSchema",
]

"""Storage backend kinds and the shared base class for record storages.

The backend kind is a closed enum. Each kind resolves to exactly one apply
strategy: ``DIRECT`` kinds are seeded through the storage's own record
operations, ``DELEGATE`` kinds are handed to the relational processor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from enum import Enum
from typing import Any, assert_never

from storagedb.logging import get_logger
from storagedb.protocols import Record

from .tables import Tables

logger = get_logger(__name__)


class StorageBackendKind(str, Enum):
    """Supported storage backends."""

    JSON_FILE = "json_file"
    IN_MEMORY = "in_memory"
    SQLITE = "sqlite"
    MYSQL = "mysql"
    MARIADB = "mariadb"


class ApplyStrategy(str, Enum):
    """How table definitions are applied to a backend."""

    DIRECT = "direct"  # storage record operations
    DELEGATE = "delegate"  # relational processor


def apply_strategy(kind: StorageBackendKind) -> ApplyStrategy:
    """Resolve the apply strategy of a backend kind."""
    match kind:
        case StorageBackendKind.JSON_FILE | StorageBackendKind.IN_MEMORY:
            return ApplyStrategy.DIRECT
        case StorageBackendKind.SQLITE | StorageBackendKind.MYSQL | StorageBackendKind.MARIADB:
            return ApplyStrategy.DELEGATE
        case _:
            assert_never(kind)


class BaseStorage(ABC):
    """
    Abstract base class for record storages.

    Provides the transaction context manager and record preparation
    (column filtering, primary key assignment). Subclasses implement the
    record operations and the ``_begin`` / ``_commit`` / ``_rollback`` hooks.

    Nested ``transaction()`` blocks join the outermost one.
    """

    kind: StorageBackendKind

    def __init__(self, tables: Tables | None = None):
        self._tables = tables if tables is not None else Tables()
        self._depth = 0

    @property
    def tables(self) -> Tables:
        """Registered table schemas."""
        return self._tables

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @abstractmethod
    def count(self, table: str) -> int:
        """Number of records in ``table``."""
        ...

    @abstractmethod
    def store_items(self, table: str, items: Sequence[Record]) -> list[Record]:
        """Replace the records of ``table`` and return the stored records."""
        ...

    @abstractmethod
    def fetch_items(self, table: str) -> list[Record]:
        """All records of ``table`` in stored order."""
        ...

    @abstractmethod
    def delete_table(self, table: str) -> None:
        """Remove ``table`` and its records."""
        ...

    @contextmanager
    def transaction(self) -> Iterator[BaseStorage]:
        """Transaction context manager.

        Commits on normal exit. Any exception, including
        ``KeyboardInterrupt``, rolls back and re-raises.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._begin()
        self._depth = 1
        try:
            yield self
        except BaseException:
            self._rollback()
            logger.warning("storage.transaction_rolled_back", backend=self.kind.value)
            raise
        finally:
            self._depth = 0
        self._commit()

    @abstractmethod
    def _begin(self) -> None: ...

    @abstractmethod
    def _commit(self) -> None: ...

    @abstractmethod
    def _rollback(self) -> None: ...

    def _prepare_items(self, table: str, items: Sequence[Record]) -> list[Record]:
        """Project items onto the table's columns and assign missing primary keys.

        Unregistered tables are registered with the ordered union of item keys.
        """
        schema = self._tables.get(table)
        if schema is None:
            columns: dict[str, None] = {}
            for item in items:
                columns.update(dict.fromkeys(item))
            self._tables.add(table, columns)
            schema = self._tables.get(table)
            assert schema is not None

        records = [{col: item.get(col) for col in schema.columns} for item in items]

        pk = schema.primary_key
        if pk is not None:
            next_id = 1 + max(
                (r[pk] for r in records if isinstance(r[pk], int)),
                default=0,
            )
            for record in records:
                if record[pk] is None:
                    record[pk] = next_id
                    next_id += 1

        return records

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value}, tables={self._tables.names()})"


def describe_backends() -> list[dict[str, Any]]:
    """List every backend kind with its apply strategy."""
    return [
        {"backend": kind.value, "strategy": apply_strategy(kind).value}
        for kind in StorageBackendKind
    ]


__all__ = [
    "StorageBackendKind",
    "ApplyStrategy",
    "apply_strategy",
    "BaseStorage",
    "describe_backends",
]

"""Database adapter base class.

An adapter owns one DB-API connection and the dialect that writes SQL for
it. Subclasses only know how to open a driver connection (:meth:`_open`);
statement execution, batching and transactions live here so every driver
behaves the same.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from itertools import groupby
from typing import Any

from storagedb.dialect import Dialect, get_dialect
from storagedb.logging import get_logger
from storagedb.protocols import Connection

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class DatabaseAdapter(ABC):
    """Connection lifecycle and cursor-based execution over a DB-API driver."""

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._dialect = get_dialect(config.db_type)
        self._conn: Any = None

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @abstractmethod
    def _open(self) -> Connection:
        """Open a new driver connection or raise ``DatabaseConnectionError``."""

    def connect(self) -> None:
        """Open the connection unless it is already open."""
        if self._conn is None:
            self._conn = self._open()
            logger.debug("adapter.connected", db_type=self.db_type.value, target=self._config.redacted_url())

    def disconnect(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    def get_connection(self) -> Connection:
        self.connect()
        return self._conn

    def begin(self) -> None:
        """Start a transaction explicitly.

        No-op for drivers that open one implicitly on the first statement.
        """

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Commit when the block exits cleanly, roll back and re-raise otherwise."""
        conn = self.get_connection()
        self.begin()
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise

    def commit(self) -> None:
        self.get_connection().commit()

    def rollback(self) -> None:
        self.get_connection().rollback()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Run one statement and return its cursor."""
        cursor = self.get_connection().cursor()
        cursor.execute(sql, tuple(params))
        return cursor

    def executemany(self, sql: str, rows: Sequence[Sequence[Any]]) -> Any:
        cursor = self.get_connection().cursor()
        cursor.executemany(sql, [tuple(row) for row in rows])
        return cursor

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        cursor = self.execute(sql, params)
        names = [column[0] for column in cursor.description]
        return [dict(zip(names, tuple(row), strict=True)) for row in cursor.fetchall()]

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        rows = self.query(sql, params)
        return rows[0] if rows else None

    def insert_many(self, table: str, rows: Sequence[dict[str, Any]]) -> int:
        """Insert ``rows``; each run of rows with the same keys is one ``executemany``."""
        for columns, run in groupby(rows, key=lambda row: tuple(row)):
            self.executemany(
                self._dialect.insert(table, list(columns)),
                [tuple(row[column] for column in columns) for row in run],
            )
        return len(rows)

    def table_exists(self, table: str) -> bool:
        return self.query_one(self._dialect.table_exists_query(), (table,)) is not None

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config.redacted_url()!r})"


__all__ = [
    "DatabaseAdapter",
]

"""SQLite adapter over the stdlib ``sqlite3`` driver."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from storagedb.errors import DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter for a SQLite file or an in-memory database.

    ``readonly`` opens the file with ``mode=ro``; an in-memory database is
    never read-only. Rows come back as :class:`sqlite3.Row` so
    :meth:`query` can key them by column name.

    The driver runs in autocommit mode and transactions start with an
    explicit ``BEGIN``, so DDL inside :meth:`transaction` rolls back too.
    """

    def __init__(self, path: str | Path = ":memory:", *, readonly: bool = False, timeout: float = 5.0):
        super().__init__(
            DatabaseConfig(db_type=DatabaseType.SQLITE, path=str(path), readonly=readonly, timeout=timeout)
        )

    @property
    def path(self) -> str:
        return self.config.path

    @property
    def in_memory(self) -> bool:
        return self.path == ":memory:"

    def _target(self) -> tuple[str, bool]:
        path = self.path
        if path.startswith("file:"):
            return path, True
        if self.config.readonly and not self.in_memory:
            return f"{Path(path).resolve().as_uri()}?mode=ro", True
        return path, False

    def _open(self) -> sqlite3.Connection:
        target, uri = self._target()
        try:
            conn = sqlite3.connect(
                target,
                timeout=self.config.timeout,
                check_same_thread=False,
                uri=uri,
                isolation_level=None,
            )
        except sqlite3.Error as e:
            raise DatabaseConnectionError(f"Cannot open SQLite database {self.path!r}: {e}", cause=e) from e
        conn.row_factory = sqlite3.Row
        return conn

    def begin(self) -> None:
        conn = self.get_connection()
        if not conn.in_transaction:
            conn.execute("BEGIN")


__all__ = [
    "SQLiteAdapter",
]

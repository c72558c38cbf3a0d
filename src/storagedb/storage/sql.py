"""SQL-backed record storage.

Records map onto rows of an existing SQL table reached through a
:class:`~storagedb.adapters.base.DatabaseAdapter`. Table DDL is not this
class's job: tables are created by the relational processor.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from storagedb.adapters.base import DatabaseAdapter
from storagedb.errors import QueryError, StorageDbError, TableNotFoundError
from storagedb.protocols import Record

from .base import BaseStorage, StorageBackendKind
from .tables import Tables


class SqlStorage(BaseStorage):
    """
    Record storage over a SQL database.

    The backend kind follows the adapter's database type. Outside a
    transaction every write is committed immediately. Implements the
    ``SqlCapableStorage`` capability through :meth:`database_adapter`.
    """

    def __init__(self, adapter: DatabaseAdapter, tables: Tables | None = None):
        super().__init__(tables)
        self._adapter = adapter
        self.kind = StorageBackendKind(adapter.db_type.value)
        self._tables_snapshot: Tables | None = None

    def database_adapter(self) -> DatabaseAdapter:
        return self._adapter

    @contextmanager
    def _statement(self, table: str) -> Iterator[None]:
        """Wrap driver errors as ``QueryError``; outside a transaction each call is its own."""
        if not self.in_transaction:
            self._adapter.begin()
        try:
            yield
        except Exception as e:
            if not self.in_transaction:
                self._adapter.rollback()
            if isinstance(e, StorageDbError):
                raise
            raise QueryError(f"Statement on table {table!r} failed: {e}", cause=e).with_context(
                table=table, backend=self.kind.value
            ) from e
        if not self.in_transaction:
            self._adapter.commit()

    def _require(self, table: str) -> None:
        if not self._adapter.table_exists(table):
            raise TableNotFoundError(table)

    def count(self, table: str) -> int:
        with self._statement(table):
            self._require(table)
            return int(self._adapter.execute(self._adapter.dialect.count(table)).fetchone()[0])

    def store_items(self, table: str, items: Sequence[Record]) -> list[Record]:
        with self._statement(table):
            self._require(table)
            records = self._prepare_items(table, items)
            self._adapter.execute(self._adapter.dialect.delete_all(table))
            self._adapter.insert_many(table, records)
        return [dict(record) for record in records]

    def fetch_items(self, table: str) -> list[Record]:
        schema = self._tables.get(table)
        order_by = schema.primary_key if schema else None
        with self._statement(table):
            self._require(table)
            return self._adapter.query(self._adapter.dialect.select_all(table, order_by))

    def delete_table(self, table: str) -> None:
        with self._statement(table):
            self._adapter.execute(self._adapter.dialect.drop_table(table))
        self._tables.remove(table)

    # -- Transaction hooks -------------------------------------------------

    def _begin(self) -> None:
        self._adapter.begin()
        self._tables_snapshot = self._tables.copy()

    def _commit(self) -> None:
        self._adapter.commit()
        self._tables_snapshot = None

    def _rollback(self) -> None:
        self._adapter.rollback()
        if self._tables_snapshot is not None:
            self._tables.restore(self._tables_snapshot)
            self._tables_snapshot = None


__all__ = [
    "SqlStorage",
]

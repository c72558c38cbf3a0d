"""In-memory record storage."""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence

from storagedb.errors import TableNotFoundError
from storagedb.protocols import Record

from .base import BaseStorage, StorageBackendKind
from .tables import Tables


class InMemoryStorage(BaseStorage):
    """
    Process-local record storage.

    Suitable for:
    - Testing
    - Ephemeral seed data

    Transactions snapshot records and the table registry and restore both
    on rollback. Nothing is durable.
    """

    kind = StorageBackendKind.IN_MEMORY

    def __init__(
        self,
        items: Mapping[str, Sequence[Record]] | None = None,
        tables: Tables | None = None,
    ):
        super().__init__(tables)
        self._items: dict[str, list[Record]] = {
            name: [dict(record) for record in records]
            for name, records in (items or {}).items()
        }
        self._snapshot: tuple[dict[str, list[Record]], Tables] | None = None

    def _exists(self, table: str) -> bool:
        return table in self._items or self._tables.has(table)

    def count(self, table: str) -> int:
        if not self._exists(table):
            raise TableNotFoundError(table)
        return len(self._items.get(table, []))

    def store_items(self, table: str, items: Sequence[Record]) -> list[Record]:
        records = self._prepare_items(table, items)
        self._items[table] = records
        return [dict(record) for record in records]

    def fetch_items(self, table: str) -> list[Record]:
        if not self._exists(table):
            raise TableNotFoundError(table)
        return [dict(record) for record in self._items.get(table, [])]

    def delete_table(self, table: str) -> None:
        self._items.pop(table, None)
        self._tables.remove(table)

    # -- Transaction hooks -------------------------------------------------

    def _begin(self) -> None:
        self._snapshot = (copy.deepcopy(self._items), self._tables.copy())

    def _commit(self) -> None:
        self._snapshot = None

    def _rollback(self) -> None:
        if self._snapshot is None:
            return
        items, tables = self._snapshot
        self._items = items
        self._tables.restore(tables)
        self._snapshot = None


__all__ = [
    "InMemoryStorage",
]

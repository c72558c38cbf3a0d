"""JSON file record storage.

Each table lives in ``<dir>/<table>.json`` as a JSON array of records.
"""

from __future__ import annotations

import json
import os
from collections.abc import Sequence
from pathlib import Path

from storagedb.errors import StorageError, TableNotFoundError
from storagedb.protocols import Record

from .base import BaseStorage, StorageBackendKind
from .tables import Tables

_FORBIDDEN = ("/", "\\", "\0")


class JsonFileStorage(BaseStorage):
    """
    File-backed record storage.

    The directory is created on first write. Transactions snapshot the
    table files on entry and rewrite them on rollback; this is best-effort
    and only safe within a single process.
    """

    kind = StorageBackendKind.JSON_FILE

    def __init__(self, dir: str | Path, tables: Tables | None = None):
        super().__init__(tables)
        self._dir = Path(dir)
        self._snapshot: tuple[dict[Path, bytes], Tables] | None = None

    @property
    def dir(self) -> Path:
        return self._dir

    def _path(self, table: str) -> Path:
        if table in ("", ".", "..") or any(char in table for char in _FORBIDDEN):
            raise StorageError(f"Invalid table name for file storage: {table!r}")
        return self._dir / f"{table}.json"

    def _read(self, table: str) -> list[Record]:
        path = self._path(table)
        if not path.exists():
            if self._tables.has(table):
                return []
            raise TableNotFoundError(table)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to read {path}: {e}", cause=e) from e

    def _write(self, table: str, records: list[Record]) -> None:
        path = self._path(table)
        tmp = path.with_suffix(".json.tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write {path}: {e}", cause=e) from e

    def count(self, table: str) -> int:
        return len(self._read(table))

    def store_items(self, table: str, items: Sequence[Record]) -> list[Record]:
        records = self._prepare_items(table, items)
        self._write(table, records)
        return [dict(record) for record in records]

    def fetch_items(self, table: str) -> list[Record]:
        return self._read(table)

    def delete_table(self, table: str) -> None:
        path = self._path(table)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}", cause=e) from e
        self._tables.remove(table)

    # -- Transaction hooks -------------------------------------------------

    def _table_files(self) -> list[Path]:
        if not self._dir.exists():
            return []
        return sorted(self._dir.glob("*.json"))

    def _begin(self) -> None:
        files = {path: path.read_bytes() for path in self._table_files()}
        self._snapshot = (files, self._tables.copy())

    def _commit(self) -> None:
        self._snapshot = None

    def _rollback(self) -> None:
        if self._snapshot is None:
            return
        files, tables = self._snapshot
        for path in self._table_files():
            if path not in files:
                path.unlink(missing_ok=True)
        for path, content in files.items():
            path.write_bytes(content)
        self._tables.restore(tables)
        self._snapshot = None


__all__ = [
    "JsonFileStorage",
]

"""Table schema registry shared by the record storages."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TableSchema:
    """Columns and primary key of one storage table."""

    name: str
    columns: tuple[str, ...] = field(default_factory=tuple)
    primary_key: str | None = None


class Tables:
    """
    Registry of table schemas.

    Usage:
        tables = Tables().add("users", ["id", "name"], primary_key="id")
        tables.get("users").columns  # ("id", "name")
    """

    def __init__(self) -> None:
        self._tables: dict[str, TableSchema] = {}

    def add(
        self,
        name: str,
        columns: Iterable[str],
        primary_key: str | None = None,
    ) -> Tables:
        """Register (or replace) a table schema."""
        cols = tuple(columns)
        if primary_key is not None and primary_key not in cols:
            cols = (primary_key, *cols)
        self._tables[name] = TableSchema(name=name, columns=cols, primary_key=primary_key)
        return self

    def get(self, name: str) -> TableSchema | None:
        return self._tables.get(name)

    def has(self, name: str) -> bool:
        return name in self._tables

    def remove(self, name: str) -> None:
        self._tables.pop(name, None)

    def names(self) -> list[str]:
        return list(self._tables)

    def copy(self) -> Tables:
        clone = Tables()
        clone._tables = dict(self._tables)
        return clone

    def restore(self, snapshot: Tables) -> None:
        """Reset this registry to the contents of ``snapshot``."""
        self._tables = dict(snapshot._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[TableSchema]:
        return iter(list(self._tables.values()))


__all__ = [
    "TableSchema",
    "Tables",
]

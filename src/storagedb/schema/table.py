"""Table definitions applied by the schema processors.

A ``Table`` describes one schema unit: its columns, an optional seed
payload, and whether it should be dropped instead.

Usage:
    table = (
        Table("users")
        .primary("id")
        .string("name")
        .with_items([{"name": "John"}, {"name": "Mia"}], with_transaction=True)
    )
    processor.process(table, database)

    processor.process(Table("users").drop(), database)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from storagedb.errors import SchemaError


class ColumnType(str, Enum):
    """Portable column types."""

    PRIMARY = "primary"  # auto-increment integer primary key
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    JSON = "json"


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType = ColumnType.STRING
    length: int | None = None
    nullable: bool = True


@dataclass
class Table:
    """
    One table definition.

    Attributes:
        name: Table (collection) name, non-empty
        columns: Ordered column definitions, used by relational backends
        items: Records to seed; ``None`` means structure only
        dropping: Delete the table instead of creating/seeding it
        forcing_insert: Seed even if the table already holds records
        with_transaction: Apply inside a transaction
    """

    name: str
    columns: list[Column] = field(default_factory=list)
    items: list[dict[str, Any]] | None = None
    dropping: bool = False
    forcing_insert: bool = False
    with_transaction: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise SchemaError(f"Table name must be a non-empty string, got {self.name!r}")

    # -- Columns -----------------------------------------------------------

    def column(self, name: str, type: ColumnType, **options: Any) -> Table:
        if any(c.name == name for c in self.columns):
            raise SchemaError(f"Duplicate column {name!r} on table {self.name!r}")
        self.columns.append(Column(name=name, type=type, **options))
        return self

    def primary(self, name: str = "id") -> Table:
        return self.column(name, ColumnType.PRIMARY, nullable=False)

    def string(self, name: str, length: int = 255, *, nullable: bool = True) -> Table:
        return self.column(name, ColumnType.STRING, length=length, nullable=nullable)

    def text(self, name: str, *, nullable: bool = True) -> Table:
        return self.column(name, ColumnType.TEXT, nullable=nullable)

    def integer(self, name: str, *, nullable: bool = True) -> Table:
        return self.column(name, ColumnType.INTEGER, nullable=nullable)

    def float(self, name: str, *, nullable: bool = True) -> Table:
        return self.column(name, ColumnType.FLOAT, nullable=nullable)

    def boolean(self, name: str, *, nullable: bool = True) -> Table:
        return self.column(name, ColumnType.BOOLEAN, nullable=nullable)

    def json(self, name: str, *, nullable: bool = True) -> Table:
        return self.column(name, ColumnType.JSON, nullable=nullable)

    @property
    def primary_key(self) -> str | None:
        for column in self.columns:
            if column.type is ColumnType.PRIMARY:
                return column.name
        return None

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    # -- Items / dropping --------------------------------------------------

    def with_items(
        self,
        items: Iterable[Mapping[str, Any]],
        *,
        forcing_insert: bool = False,
        with_transaction: bool = True,
    ) -> Table:
        """Set the seed payload and how it is applied.

        Seeding runs in a transaction unless ``with_transaction=False``.
        """
        self.items = [dict(item) for item in items]
        self.forcing_insert = forcing_insert
        self.with_transaction = with_transaction
        return self

    def drop(self, *, with_transaction: bool | None = None) -> Table:
        """Mark the table for deletion."""
        self.dropping = True
        if with_transaction is not None:
            self.with_transaction = with_transaction
        return self


__all__ = [
    "ColumnType",
    "Column",
    "Table",
]

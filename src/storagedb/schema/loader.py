"""YAML schema documents.

Format::

    tables:
      - name: users
        columns:
          - {name: id, type: primary}
          - {name: name, type: string, length: 120}
        items:
          - {name: John}
        forcing_insert: false
        with_transaction: true
      - name: legacy
        drop: true

Documents are validated with pydantic; any problem surfaces as
:class:`~storagedb.errors.SchemaError`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storagedb.errors import SchemaError

from .table import Column, ColumnType, Table


class ColumnSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    type: ColumnType = ColumnType.STRING
    length: int | None = Field(default=None, gt=0)
    nullable: bool = True


class TableSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    columns: list[ColumnSpec] = Field(default_factory=list)
    items: list[dict[str, Any]] | None = None
    drop: bool = False
    forcing_insert: bool = False
    with_transaction: bool | None = None

    def to_table(self) -> Table:
        # Seeds default to a transaction; bare and drop definitions do not.
        with_transaction = self.with_transaction
        if with_transaction is None:
            with_transaction = self.items is not None
        return Table(
            name=self.name,
            columns=[Column(**column.model_dump()) for column in self.columns],
            items=self.items,
            dropping=self.drop,
            forcing_insert=self.forcing_insert,
            with_transaction=with_transaction,
        )


class SchemaDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tables: list[TableSpec] = Field(default_factory=list)


def parse_tables(data: Any) -> list[Table]:
    """Build tables from an already-parsed schema document."""
    try:
        document = SchemaDocument.model_validate(data or {})
    except ValidationError as e:
        raise SchemaError(f"Invalid schema document: {e}", cause=e) from e
    return [spec.to_table() for spec in document.tables]


def load_tables(path: str | Path) -> list[Table]:
    """Read a YAML schema file and return its tables in document order."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise SchemaError(f"Could not read schema file {path}: {e}", cause=e) from e
    return parse_tables(data)


__all__ = [
    "ColumnSpec",
    "TableSpec",
    "SchemaDocument",
    "parse_tables",
    "load_tables",
]

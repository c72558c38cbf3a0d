"""
SQL dialect abstraction for the relational backends.

Each dialect knows its placeholder style, identifier quoting and the DDL
needed to turn a :class:`~storagedb.schema.table.Table` into a SQL table.
Dialects are stateless singletons looked up with :func:`get_dialect`.

Examples:
    >>> from storagedb.dialect import get_dialect
    >>> d = get_dialect("mysql")
    >>> d.placeholders(2)
    '%s, %s'
    >>> d.drop_table("users")
    'DROP TABLE IF EXISTS `users`'

Guardrails:
    ❌ DON'T: Hard-code ``?`` or ``%s`` in storages or processors
    ✅ DO: Use ``dialect.placeholders(n)``
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from storagedb.schema.table import Column


@runtime_checkable
class Dialect(Protocol):
    """Backend-specific SQL generation."""

    @property
    def name(self) -> str: ...

    def placeholder(self, index: int) -> str: ...

    def placeholders(self, count: int) -> str: ...

    def quote(self, identifier: str) -> str: ...

    def column_definition(self, column: Column) -> str: ...

    def create_table(self, table: str, columns: Sequence[Column]) -> str: ...

    def drop_table(self, table: str) -> str: ...

    def insert(self, table: str, columns: Sequence[str]) -> str: ...

    def count(self, table: str) -> str: ...

    def select_all(self, table: str, order_by: str | None = None) -> str: ...

    def delete_all(self, table: str) -> str: ...

    def table_exists_query(self) -> str: ...


class _BaseDialect:
    """Shared DDL/DML generation; subclasses set quoting and type names."""

    _quote_char = '"'
    _auto_increment = ""
    _types: dict[str, str] = {}

    @property
    def name(self) -> str:
        raise NotImplementedError

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        raise NotImplementedError

    def placeholders(self, count: int) -> str:
        return ", ".join(self.placeholder(i) for i in range(count))

    def quote(self, identifier: str) -> str:
        q = self._quote_char
        return f"{q}{identifier.replace(q, q + q)}{q}"

    def column_definition(self, column: Column) -> str:
        col_type = column.type.value
        if col_type == "primary":
            return f"{self.quote(column.name)} {self._auto_increment}"
        sql_type = self._types[col_type]
        if col_type == "string":
            sql_type = f"{sql_type}({column.length or 255})"
        null = "NULL" if column.nullable else "NOT NULL"
        return f"{self.quote(column.name)} {sql_type} {null}"

    def create_table(self, table: str, columns: Sequence[Column]) -> str:
        defs = ", ".join(self.column_definition(c) for c in columns)
        return f"CREATE TABLE IF NOT EXISTS {self.quote(table)} ({defs})"

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {self.quote(table)}"

    def insert(self, table: str, columns: Sequence[str]) -> str:
        cols = ", ".join(self.quote(c) for c in columns)
        ph = self.placeholders(len(columns))
        return f"INSERT INTO {self.quote(table)} ({cols}) VALUES ({ph})"

    def count(self, table: str) -> str:
        return f"SELECT COUNT(*) FROM {self.quote(table)}"

    def select_all(self, table: str, order_by: str | None = None) -> str:
        sql = f"SELECT * FROM {self.quote(table)}"
        if order_by:
            sql += f" ORDER BY {self.quote(order_by)}"
        return sql

    def delete_all(self, table: str) -> str:
        return f"DELETE FROM {self.quote(table)}"

    def table_exists_query(self) -> str:
        raise NotImplementedError


class SQLiteDialect(_BaseDialect):
    """SQLite dialect — ``?`` placeholders, double-quoted identifiers."""

    _quote_char = '"'
    _auto_increment = "INTEGER PRIMARY KEY AUTOINCREMENT"
    _types = {
        "string": "VARCHAR",
        "text": "TEXT",
        "integer": "INTEGER",
        "float": "REAL",
        "boolean": "INTEGER",
        "json": "TEXT",
    }

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def table_exists_query(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type='table' AND name = ?"


class MySQLDialect(_BaseDialect):
    """MySQL / MariaDB dialect — ``%s`` placeholders, backtick identifiers.

    Compatible with ``mysql.connector`` (format paramstyle).
    """

    _quote_char = "`"
    _auto_increment = "INTEGER PRIMARY KEY AUTO_INCREMENT"
    _types = {
        "string": "VARCHAR",
        "text": "TEXT",
        "integer": "BIGINT",
        "float": "DOUBLE",
        "boolean": "TINYINT(1)",
        "json": "JSON",
    }

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def table_exists_query(self) -> str:
        return (
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s"
        )


# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Args:
        db_type: One of ``'sqlite'``, ``'mysql'``, ``'mariadb'`` (or a
            str-valued enum member).

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.value if hasattr(db_type, "value") else str(db_type).lower()
    if key not in _DIALECTS:
        raise ValueError(f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}")
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
]

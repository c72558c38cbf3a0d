"""Table definitions and schema documents."""

from .loader import load_tables, parse_tables
from .table import Column, ColumnType, Table

__all__ = [
    "Column",
    "ColumnType",
    "Table",
    "load_tables",
    "parse_tables",
]

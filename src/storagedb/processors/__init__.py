"""Table processors: apply table definitions to databases."""

from .actions import ApplyAction
from .sql import SqlTableProcessor
from .storage import StorageDatabaseProcessor, merge_items

__all__ = [
    "ApplyAction",
    "SqlTableProcessor",
    "StorageDatabaseProcessor",
    "merge_items",
]

"""
Structured error types for storagedb.

Every failure raised by the package is a ``StorageDbError`` carrying a
category, a retry flag, structured context (database, table, backend) and
the chained underlying exception.

Manifesto:
    - **Typed Error Hierarchy:** Configuration, schema, apply and storage
      failures are distinct types so callers decide policy per kind
    - **Explicit Retry Semantics:** Nothing here is retried internally;
      ``retryable`` only tells the caller what is worth retrying
    - **Error Chaining:** The storage or driver exception is kept as ``cause``

Architecture:
    ::

        StorageDbError
        ├── ConfigurationError        (CONFIG)
        │   ├── MissingConfigError
        │   ├── InvalidConfigError
        │   └── DatabaseNotFoundError
        ├── UnsupportedBackendError   (CONFIG)
        ├── SchemaError               (VALIDATION)
        ├── ApplyError                (DATABASE)
        ├── DatabaseConnectionError   (DATABASE, retryable)
        └── StorageError              (STORAGE)
            ├── TableNotFoundError
            └── QueryError

Guardrails:
    ❌ DON'T: Raise bare Exception from storages or processors
    ✅ DO: Raise the matching subclass and pass ``cause=``

Tags:
    error-handling, exception-hierarchy, error-context, storagedb
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Where a failure comes from, for routing and reporting."""

    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    DATABASE = "DATABASE"
    STORAGE = "STORAGE"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """What an operation was working on when it failed.

    Unknown keys passed to :meth:`StorageDbError.with_context` land in
    ``metadata``.
    """

    database: str | None = None
    table: str | None = None
    backend: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        known = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "metadata" and getattr(self, f.name) is not None
        }
        return {**known, **self.metadata}


class StorageDbError(Exception):
    """
    Base exception for all storagedb errors.

    Subclasses pin ``category`` and ``retryable`` as class attributes;
    the constructor overrides them per instance.

    Examples:
        >>> error = ApplyError("disk full").with_context(table="users")
        >>> error.context.table
        'users'
        >>> error.to_dict()["category"]
        'DATABASE'
    """

    category: ErrorCategory = ErrorCategory.INTERNAL
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        if category is not None:
            self.category = category
        if retryable is not None:
            self.retryable = retryable
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> StorageDbError:
        """Attach context and return ``self``, so it chains onto ``raise``."""
        for key, value in kwargs.items():
            if key in ("database", "table", "backend"):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for structured logs and JSON output."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# -- configuration -------------------------------------------------------------


class ConfigurationError(StorageDbError):
    """Bad or missing configuration. Fix the config; retrying will not help."""

    category = ErrorCategory.CONFIG


class MissingConfigError(ConfigurationError):
    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigurationError):
    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


class DatabaseNotFoundError(ConfigurationError):
    """No database registered under the referenced name."""

    def __init__(self, name: str):
        self.database_name = name
        super().__init__(f"Database not found: {name}")


# -- schema application --------------------------------------------------------


class UnsupportedBackendError(StorageDbError):
    """The processor cannot handle the database's storage backend."""

    category = ErrorCategory.CONFIG


class SchemaError(StorageDbError):
    """Table definition or schema document is invalid."""

    category = ErrorCategory.VALIDATION


class ApplyError(StorageDbError):
    """Creating, seeding or dropping a table failed."""

    category = ErrorCategory.DATABASE


class DatabaseConnectionError(StorageDbError):
    category = ErrorCategory.DATABASE
    retryable = True


# -- storage -------------------------------------------------------------------


class StorageError(StorageDbError):
    """A storage engine failed (file system, SQL driver)."""

    category = ErrorCategory.STORAGE


class TableNotFoundError(StorageError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table not found: {table}", context=ErrorContext(table=table))


class QueryError(StorageError):
    """A SQL statement failed."""


def is_retryable(error: BaseException) -> bool:
    if isinstance(error, StorageDbError):
        return error.retryable
    return isinstance(error, ConnectionError)


def categorize_error(error: BaseException) -> ErrorCategory:
    """Map any exception onto an :class:`ErrorCategory`."""
    match error:
        case StorageDbError():
            return error.category
        case OSError():
            return ErrorCategory.STORAGE
        case KeyError() | ValueError():
            return ErrorCategory.VALIDATION
        case _:
            return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "StorageDbError",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "DatabaseNotFoundError",
    "UnsupportedBackendError",
    "SchemaError",
    "ApplyError",
    "DatabaseConnectionError",
    "StorageError",
    "TableNotFoundError",
    "QueryError",
    "is_retryable",
    "categorize_error",
]

"""Tests for ``storagedb.errors``."""

import pytest

from storagedb.errors import (
    ApplyError,
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseNotFoundError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    MissingConfigError,
    SchemaError,
    StorageDbError,
    StorageError,
    TableNotFoundError,
    UnsupportedBackendError,
    categorize_error,
    is_retryable,
)


class TestErrorContext:
    def test_empty(self):
        ctx = ErrorContext()
        assert ctx.to_dict() == {}

    def test_to_dict_excludes_none(self):
        ctx = ErrorContext(table="users", metadata={"rows": 2})
        assert ctx.to_dict() == {"table": "users", "rows": 2}


class TestStorageDbError:
    def test_defaults(self):
        error = StorageDbError("boom")
        assert error.message == "boom"
        assert error.category is ErrorCategory.INTERNAL
        assert error.retryable is False

    def test_cause_is_chained(self):
        cause = OSError("disk")
        error = ApplyError("failed", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "disk"

    def test_with_context(self):
        error = ApplyError("failed").with_context(table="users", backend="json_file", attempt=1)
        assert error.context.table == "users"
        assert error.context.backend == "json_file"
        assert error.context.metadata == {"attempt": 1}

    def test_to_dict(self):
        data = ApplyError("failed").with_context(database="storage").to_dict()
        assert data == {
            "error_type": "ApplyError",
            "message": "failed",
            "category": "DATABASE",
            "retryable": False,
            "context": {"database": "storage"},
        }


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            MissingConfigError("storage"),
            InvalidConfigError("storage", "redis"),
            DatabaseNotFoundError("sql"),
        ],
    )
    def test_configuration_errors(self, error):
        assert isinstance(error, ConfigurationError)
        assert error.category is ErrorCategory.CONFIG

    def test_messages(self):
        assert str(MissingConfigError("dir")) == "Missing required configuration: dir"
        assert str(DatabaseNotFoundError("sql")) == "Database not found: sql"
        assert str(TableNotFoundError("users")) == "Table not found: users"

    def test_table_not_found_context(self):
        assert TableNotFoundError("users").context.table == "users"
        assert isinstance(TableNotFoundError("users"), StorageError)

    def test_categories(self):
        assert UnsupportedBackendError("x").category is ErrorCategory.CONFIG
        assert SchemaError("x").category is ErrorCategory.VALIDATION
        assert ApplyError("x").category is ErrorCategory.DATABASE


class TestHelpers:
    def test_is_retryable(self):
        assert is_retryable(DatabaseConnectionError("down")) is True
        assert is_retryable(ApplyError("failed")) is False
        assert is_retryable(UnsupportedBackendError("x")) is False
        assert is_retryable(ConnectionError()) is True
        assert is_retryable(ValueError()) is False

    def test_categorize_error(self):
        assert categorize_error(SchemaError("x")) is ErrorCategory.VALIDATION
        assert categorize_error(FileNotFoundError()) is ErrorCategory.STORAGE
        assert categorize_error(KeyError("k")) is ErrorCategory.VALIDATION
        assert categorize_error(RuntimeError()) is ErrorCategory.UNKNOWN

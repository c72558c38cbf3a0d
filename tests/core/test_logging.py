"""
Tests for the logging module.

Tests verify:
- configure_logging accepts console and JSON output
- LogContext binds and unbinds context variables
- The schema processor logs its decisions as events
"""

import pytest
import structlog
from structlog.testing import capture_logs

from storagedb.database import StorageDatabase
from storagedb.errors import InvalidConfigError
from storagedb.logging import LogContext, bind_context, clear_context, configure_logging, get_logger
from storagedb.processors import StorageDatabaseProcessor
from storagedb.schema.table import Table
from storagedb.storage import InMemoryStorage


class TestConfigureLogging:
    def test_console(self):
        configure_logging(level="DEBUG", json_format=False)
        assert get_logger("test") is not None

    def test_json(self):
        configure_logging(level="INFO", json_format=True, service="tests")
        assert get_logger("test") is not None


class TestContext:
    def teardown_method(self):
        clear_context()

    def test_bind_context(self):
        bind_context(database="storage")
        assert structlog.contextvars.get_contextvars() == {"database": "storage"}

    def test_log_context_unbinds(self):
        with LogContext(schema_file="schema.yaml"):
            assert structlog.contextvars.get_contextvars()["schema_file"] == "schema.yaml"
        assert "schema_file" not in structlog.contextvars.get_contextvars()


class TestProcessorEvents:
    def test_seed_then_skip_events(self):
        database = StorageDatabase(InMemoryStorage(), name="storage")
        table = Table("users").with_items([{"name": "John"}])
        processor = StorageDatabaseProcessor()

        with capture_logs() as logs:
            processor.process(table, database)
            processor.process(table, database)

        events = [entry["event"] for entry in logs]
        assert "schema.seeded" in events
        assert "schema.seed_skipped" in events
        seeded = next(entry for entry in logs if entry["event"] == "schema.seeded")
        assert seeded["table"] == "users"
        assert seeded["database"] == "storage"
        assert seeded["backend"] == "in_memory"

    def test_drop_event(self):
        storage = InMemoryStorage(items={"users": [{"name": "John"}]})

        with capture_logs() as logs:
            StorageDatabaseProcessor().process(Table("users").drop(), StorageDatabase(storage))

        assert [entry["event"] for entry in logs] == ["schema.dropped"]


class TestLevels:
    def test_unknown_level(self):
        with pytest.raises(InvalidConfigError):
            configure_logging(level="LOUD")


class TestReconfiguration:
    def test_events_captured_after_uncached_configuration(self):
        configure_logging(level="WARNING", json_format=True, cache_loggers=False)
        storage = InMemoryStorage(items={"users": [{"name": "John"}]})

        with capture_logs() as logs:
            StorageDatabaseProcessor().process(Table("users").drop(), StorageDatabase(storage))

        assert [entry["event"] for entry in logs] == ["schema.dropped"]

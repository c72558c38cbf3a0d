"""
Shared pytest fixtures for storagedb tests.

This module provides:
- Storages for every bundled backend (memory, JSON files, SQLite)
- Storage databases parametrized over those backends
- A ``users`` table definition used by the processor scenarios
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from functools import partial

import pytest
import structlog

from storagedb.adapters.sqlite import SQLiteAdapter
from storagedb.database import SqlDatabase, StorageDatabase
from storagedb.logging import configure_logging
from storagedb.schema.table import Table
from storagedb.settings import get_settings
from storagedb.storage import InMemoryStorage, JsonFileStorage, SqlStorage

# =============================================================================
# Settings
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep ``STORAGEDB_*`` variables and the settings cache out of tests."""
    for key in list(os.environ):
        if key.startswith("STORAGEDB_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def uncached_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Let the CLI configure structlog without freezing module loggers.

    Frozen loggers would keep the CLI configuration for the rest of the
    session, and ``capture_logs`` would no longer see their events.
    """
    monkeypatch.setattr("storagedb.cli.configure_logging", partial(configure_logging, cache_loggers=False))
    yield
    structlog.reset_defaults()


# =============================================================================
# Storages
# =============================================================================


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def json_storage(tmp_path) -> JsonFileStorage:
    return JsonFileStorage(tmp_path / "data")


@pytest.fixture
def sqlite_adapter() -> Iterator[SQLiteAdapter]:
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    yield adapter
    adapter.disconnect()


@pytest.fixture
def sql_database(sqlite_adapter) -> SqlDatabase:
    return SqlDatabase(sqlite_adapter, name="sql")


@pytest.fixture
def sql_storage(sqlite_adapter) -> SqlStorage:
    return SqlStorage(sqlite_adapter)


@pytest.fixture(params=["in_memory", "json_file", "sqlite"])
def storage_database(request, tmp_path) -> StorageDatabase:
    """A storage database for each bundled backend."""
    if request.param == "in_memory":
        storage = InMemoryStorage()
    elif request.param == "json_file":
        storage = JsonFileStorage(tmp_path / "data")
    else:
        adapter = SQLiteAdapter(":memory:")
        request.addfinalizer(adapter.disconnect)
        storage = SqlStorage(adapter)
    return StorageDatabase(storage, name="storage")


# =============================================================================
# Table definitions
# =============================================================================


def _users_table(*items: dict, forcing_insert: bool = False, with_transaction: bool = False) -> Table:
    table = Table("users").primary("id").string("name")
    if items:
        table.with_items(items, forcing_insert=forcing_insert, with_transaction=with_transaction)
    return table


@pytest.fixture
def users_table():
    """Factory for ``users(id, name)`` seeded with the given items."""
    return _users_table


@pytest.fixture
def seed_items() -> list[dict]:
    return [{"name": "John"}, {"name": "Mia"}]

"""Tests for ``storagedb.processors.sql`` — relational table processor (SQLite)."""

from __future__ import annotations

import pytest

from storagedb.database import StorageDatabase
from storagedb.errors import ApplyError, UnsupportedBackendError
from storagedb.processors import ApplyAction, SqlTableProcessor
from storagedb.schema.table import Table


def _rows(adapter, table="users"):
    return adapter.query(f'SELECT * FROM "{table}" ORDER BY "id"')


class TestSupportsDatabase:
    def test_sql_database(self, sql_database):
        assert SqlTableProcessor().supports_database(sql_database) is True

    def test_storage_database(self, memory_storage):
        assert SqlTableProcessor().supports_database(StorageDatabase(memory_storage)) is False

    def test_process_unsupported(self, memory_storage, users_table):
        with pytest.raises(UnsupportedBackendError):
            SqlTableProcessor().process(users_table(), StorageDatabase(memory_storage))


class TestCreate:
    def test_creates_table(self, sql_database, sqlite_adapter, users_table):
        action = SqlTableProcessor().process(users_table(), sql_database)

        assert action is ApplyAction.CREATED
        assert sqlite_adapter.table_exists("users")

    def test_create_is_idempotent(self, sql_database, sqlite_adapter, users_table):
        processor = SqlTableProcessor()
        processor.process(users_table(), sql_database)
        processor.process(users_table(), sql_database)
        assert sqlite_adapter.table_exists("users")

    def test_table_without_columns_is_not_created(self, sql_database, sqlite_adapter):
        SqlTableProcessor().process(Table("users"), sql_database)
        assert not sqlite_adapter.table_exists("users")


class TestSeed:
    def test_seed_empty_table(self, sql_database, sqlite_adapter, users_table, seed_items):
        action = SqlTableProcessor().process(users_table(*seed_items), sql_database)

        assert action is ApplyAction.SEEDED
        assert _rows(sqlite_adapter) == [{"id": 1, "name": "John"}, {"id": 2, "name": "Mia"}]

    def test_skip_non_empty_table(self, sql_database, sqlite_adapter, users_table, seed_items):
        processor = SqlTableProcessor()
        processor.process(users_table(*seed_items), sql_database)

        action = processor.process(users_table(*seed_items), sql_database)

        assert action is ApplyAction.SKIPPED
        assert len(_rows(sqlite_adapter)) == 2

    def test_forced_insert_appends(self, sql_database, sqlite_adapter, users_table, seed_items):
        processor = SqlTableProcessor()
        processor.process(users_table(*seed_items), sql_database)

        processor.process(users_table({"name": "Ann"}, forcing_insert=True), sql_database)

        assert [r["name"] for r in _rows(sqlite_adapter)] == ["John", "Mia", "Ann"]
        assert _rows(sqlite_adapter)[-1]["id"] == 3

    def test_seed_in_transaction(self, sql_database, sqlite_adapter, users_table, seed_items):
        SqlTableProcessor().process(users_table(*seed_items, with_transaction=True), sql_database)
        assert len(_rows(sqlite_adapter)) == 2


class TestDrop:
    def test_drop_table(self, sql_database, sqlite_adapter, users_table, seed_items):
        processor = SqlTableProcessor()
        processor.process(users_table(*seed_items), sql_database)

        action = processor.process(Table("users").drop(), sql_database)

        assert action is ApplyAction.DROPPED
        assert not sqlite_adapter.table_exists("users")

    def test_drop_missing_table(self, sql_database):
        action = SqlTableProcessor().process(Table("ghosts").drop(with_transaction=True), sql_database)
        assert action is ApplyAction.DROPPED


class TestFailures:
    def test_insert_failure_raises_apply_error(self, sql_database, users_table):
        with pytest.raises(ApplyError) as exc_info:
            SqlTableProcessor().process(users_table({"missing_column": 1}), sql_database)

        assert exc_info.value.__cause__ is not None
        assert exc_info.value.context.table == "users"
        assert exc_info.value.context.backend == "sqlite"

    def test_transaction_rolls_back_inserts(self, sql_database, sqlite_adapter, users_table):
        processor = SqlTableProcessor()
        processor.process(users_table({"name": "John"}), sql_database)

        bad = users_table({"name": "Mia"}, {"missing_column": 1}, forcing_insert=True, with_transaction=True)
        with pytest.raises(ApplyError):
            processor.process(bad, sql_database)

        assert [r["name"] for r in _rows(sqlite_adapter)] == ["John"]

    def test_seeding_missing_table_without_columns(self, sql_database):
        with pytest.raises(ApplyError):
            SqlTableProcessor().process(Table("nowhere").with_items([{"a": 1}]), sql_database)

    def test_transaction_rolls_back_create(self, sql_database, sqlite_adapter, users_table):
        bad = users_table({"name": "Mia"}, {"missing_column": 1}, with_transaction=True)

        with pytest.raises(ApplyError):
            SqlTableProcessor().process(bad, sql_database)

        assert not sqlite_adapter.table_exists("users")

    def test_transaction_rolls_back_drop(self, sql_database, sqlite_adapter, users_table, seed_items, monkeypatch):
        processor = SqlTableProcessor()
        processor.process(users_table(*seed_items), sql_database)
        execute = sqlite_adapter.execute

        def drop_then_fail(sql, params=()):
            cursor = execute(sql, params)
            if sql.startswith("DROP"):
                raise RuntimeError("lost connection")
            return cursor

        monkeypatch.setattr(sqlite_adapter, "execute", drop_then_fail)

        with pytest.raises(ApplyError):
            processor.process(Table("users").drop(with_transaction=True), sql_database)

        monkeypatch.undo()
        assert sqlite_adapter.table_exists("users")
        assert len(_rows(sqlite_adapter)) == 2

    def test_failure_without_transaction_rolls_back_open_work(self, sql_database, sqlite_adapter, monkeypatch):
        rollbacks = []
        rollback = sqlite_adapter.rollback

        def record_rollback():
            rollbacks.append(True)
            rollback()

        monkeypatch.setattr(sqlite_adapter, "rollback", record_rollback)

        with pytest.raises(ApplyError):
            SqlTableProcessor().process(Table("nowhere").with_items([{"a": 1}], with_transaction=False), sql_database)

        assert rollbacks == [True]

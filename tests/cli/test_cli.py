"""Tests for storagedb.cli — commands via CliRunner.

The ``apply`` tests run real schema files against JSON-file, in-memory
and SQLite storages in ``tmp_path``.
"""

from __future__ import annotations

import json

import pytest
from structlog.testing import capture_logs
from typer.testing import CliRunner

from storagedb.cli import app
from storagedb.database import StorageDatabase
from storagedb.processors import StorageDatabaseProcessor
from storagedb.schema.table import Table
from storagedb.storage import InMemoryStorage

runner = CliRunner()

SCHEMA = """\
tables:
  - name: users
    columns:
      - {name: id, type: primary}
      - {name: name, type: string}
    items:
      - {name: John}
      - {name: Mia}
    with_transaction: true
"""

DROP_SCHEMA = """\
tables:
  - name: users
    drop: true
"""


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA, encoding="utf-8")
    return path


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("storagedb ")


class TestBackends:
    def test_table(self):
        result = runner.invoke(app, ["backends"])
        assert result.exit_code == 0
        assert "json_file" in result.output
        assert "delegate" in result.output

    def test_json(self):
        result = runner.invoke(app, ["backends", "--json"])
        assert result.exit_code == 0
        assert '"backend": "mariadb"' in result.output


class TestApply:
    def test_json_file(self, schema_file, tmp_path):
        data_dir = tmp_path / "data"
        result = runner.invoke(app, ["apply", str(schema_file), "--storage", "json_file", "--dir", str(data_dir)])

        assert result.exit_code == 0, result.output
        assert "seeded" in result.output
        records = json.loads((data_dir / "users.json").read_text(encoding="utf-8"))
        assert [r["name"] for r in records] == ["John", "Mia"]

    def test_rerun_skips(self, schema_file, tmp_path):
        args = ["apply", str(schema_file), "--storage", "json_file", "--dir", str(tmp_path / "data"), "--json"]
        runner.invoke(app, args)

        result = runner.invoke(app, args)

        assert result.exit_code == 0
        assert '"action": "skipped"' in result.output

    def test_drop(self, schema_file, tmp_path):
        data_dir = tmp_path / "data"
        runner.invoke(app, ["apply", str(schema_file), "--storage", "json_file", "--dir", str(data_dir)])
        drop = tmp_path / "drop.yaml"
        drop.write_text(DROP_SCHEMA, encoding="utf-8")

        result = runner.invoke(app, ["apply", str(drop), "--storage", "json_file", "--dir", str(data_dir)])

        assert result.exit_code == 0
        assert "dropped" in result.output
        assert not (data_dir / "users.json").exists()

    def test_sqlite(self, schema_file, tmp_path):
        db_path = tmp_path / "app.db"
        result = runner.invoke(
            app, ["apply", str(schema_file), "--storage", "sqlite", "--sqlite", str(db_path), "--json"]
        )

        assert result.exit_code == 0, result.output
        assert '"action": "seeded"' in result.output
        assert db_path.exists()

    def test_in_memory_from_env(self, schema_file, monkeypatch):
        monkeypatch.setenv("STORAGEDB_STORAGE", "in_memory")
        result = runner.invoke(app, ["apply", str(schema_file), "--name", "scratch"])

        assert result.exit_code == 0, result.output
        assert "seeded" in result.output

    def test_invalid_schema_exits_1(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("tables:\n  - name: users\n    columns:\n      - {name: id, type: uuid}\n", encoding="utf-8")

        result = runner.invoke(app, ["apply", str(bad), "--storage", "in_memory"])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_apply_error_exits_1(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text(
            "tables:\n  - name: users\n    items:\n      - {name: John}\n", encoding="utf-8"
        )

        result = runner.invoke(app, ["apply", str(bad), "--storage", "sqlite"])

        assert result.exit_code == 1

    def test_missing_schema_file(self, tmp_path):
        result = runner.invoke(app, ["apply", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0


class TestLoggingAfterApply:
    def test_processor_events_still_captured(self, schema_file, tmp_path):
        runner.invoke(app, ["apply", str(schema_file), "--storage", "json_file", "--dir", str(tmp_path / "data")])

        with capture_logs() as logs:
            StorageDatabaseProcessor().process(
                Table("users").with_items([{"name": "John"}]), StorageDatabase(InMemoryStorage(), name="storage")
            )

        assert "schema.seeded" in [entry["event"] for entry in logs]

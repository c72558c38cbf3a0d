"""
Typer application for the ``storagedb`` command.

    storagedb backends [--json]
    storagedb apply SCHEMA_FILE [--storage KIND] [--dir PATH] [--sqlite PATH] [--name NAME] [--json]
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table as RichTable

from storagedb.adapters.sqlite import SQLiteAdapter
from storagedb.database import SqlDatabase
from storagedb.errors import StorageDbError
from storagedb.factory import StorageDatabaseFactory
from storagedb.logging import LogContext, configure_logging
from storagedb.processors import StorageDatabaseProcessor
from storagedb.registry import Databases
from storagedb.schema import load_tables
from storagedb.settings import get_settings
from storagedb.storage import ApplyStrategy, StorageBackendKind, apply_strategy, describe_backends

console = Console()
err_console = Console(stderr=True)

SQL_DATABASE = "sql"

app = typer.Typer(
    name="storagedb",
    help="storagedb — apply table definitions to storage databases.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("storagedb")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"storagedb {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """storagedb CLI — create, seed and drop tables on storage databases."""


# ── Output helpers ───────────────────────────────────────────────────────


def _print_rows(rows: list[dict[str, Any]], *, as_json: bool, title: str) -> None:
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = RichTable(title=title)
    for key in rows[0]:
        table.add_column(key)
    for row in rows:
        table.add_row(*(str(value) for value in row.values()))
    console.print(table)


def _fail(error: StorageDbError) -> None:
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("backends")
def backends(json_out: bool = typer.Option(False, "--json")) -> None:
    """List storage backends and how tables are applied to them."""
    _print_rows(describe_backends(), as_json=json_out, title="Backends")


@app.command("apply")
def apply(
    schema_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    storage: StorageBackendKind | None = typer.Option(None, "--storage", "-s", help="Storage backend."),
    dir_: Path | None = typer.Option(None, "--dir", help="Directory of the json_file storage."),
    sqlite: Path | None = typer.Option(None, "--sqlite", help="SQLite file for the sqlite storage."),
    name: str | None = typer.Option(None, "--name", "-n", help="Storage database name."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Apply every table of SCHEMA_FILE to a storage database."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    overrides = {
        key: value
        for key, value in {"storage": storage, "storage_dir": dir_, "sqlite_path": sqlite}.items()
        if value is not None
    }
    settings = settings.model_copy(update=overrides)
    database_name = name or settings.database_name

    databases = Databases()
    adapter: SQLiteAdapter | None = None
    if apply_strategy(settings.storage) is ApplyStrategy.DELEGATE:
        adapter = SQLiteAdapter(settings.sqlite_path or ":memory:")
        databases.add(SqlDatabase(adapter, name=SQL_DATABASE))

    try:
        with LogContext(schema_file=str(schema_file)):
            tables = load_tables(schema_file)
            database = StorageDatabaseFactory(databases).create_database(
                database_name, settings.database_config(SQL_DATABASE)
            )
            processor = StorageDatabaseProcessor()
            rows = [
                {"table": table.name, "action": processor.process(table, database).value}
                for table in tables
            ]
    except StorageDbError as e:
        _fail(e)
    finally:
        if adapter is not None:
            adapter.disconnect()

    _print_rows(rows, as_json=json_out, title=f"Applied to {database_name}")


__all__ = [
    "app",
]

"""Relational table processor.

Applies a :class:`~storagedb.schema.table.Table` to a SQL database:
``DROP TABLE IF EXISTS`` when dropping, otherwise ``CREATE TABLE IF NOT
EXISTS`` followed by an optional seed insert.

Seeding follows the same rule as the storage processor: skip when the
table already holds rows and the insert is not forced. Relational rows
keep their own primary keys, so forced inserts are appended.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from storagedb.adapters.base import DatabaseAdapter
from storagedb.errors import ApplyError, UnsupportedBackendError
from storagedb.logging import get_logger
from storagedb.protocols import DatabaseInterface, SqlDatabaseInterface
from storagedb.schema.table import Table

from .actions import ApplyAction

logger = get_logger(__name__)


class SqlTableProcessor:
    """Creates, seeds and drops tables through a ``DatabaseAdapter``."""

    def supports_database(self, database: DatabaseInterface) -> bool:
        return isinstance(database, SqlDatabaseInterface)

    def process(self, table: Table, database: DatabaseInterface) -> ApplyAction:
        """Apply ``table`` to ``database``.

        Raises:
            UnsupportedBackendError: ``database`` is not a SQL database
            ApplyError: any failure while applying, with the cause chained
        """
        if not self.supports_database(database):
            raise UnsupportedBackendError(
                f"Database {database.name!r} is not a SQL database"
            ).with_context(database=database.name, table=table.name)

        adapter = database.adapter()
        log = logger.bind(table=table.name, database=database.name, backend=adapter.db_type.value)

        try:
            if table.with_transaction:
                with adapter.transaction():
                    action = self._apply(adapter, table, autocommit=False)
            else:
                action = self._apply(adapter, table, autocommit=True)
        except ApplyError:
            raise
        except Exception as e:
            if not table.with_transaction and adapter.is_connected:
                # Discard whatever the driver opened implicitly for the failed step.
                adapter.rollback()
            log.error("schema.sql_apply_failed", error=str(e))
            raise ApplyError(
                f"Could not apply table {table.name!r} to database {database.name!r}: {e}",
                cause=e,
            ).with_context(
                database=database.name, table=table.name, backend=adapter.db_type.value
            ) from e

        log.info(f"schema.{action.value}", forcing_insert=table.forcing_insert)
        return action

    def _apply(self, adapter: DatabaseAdapter, table: Table, *, autocommit: bool) -> ApplyAction:
        dialect = adapter.dialect

        def run(step: Callable[[], Any]) -> Any:
            result = step()
            if autocommit:
                adapter.commit()
            return result

        if table.dropping:
            run(lambda: adapter.execute(dialect.drop_table(table.name)))
            return ApplyAction.DROPPED

        if table.columns:
            run(lambda: adapter.execute(dialect.create_table(table.name, table.columns)))

        if table.items is None:
            return ApplyAction.CREATED

        if not table.forcing_insert:
            count = adapter.execute(dialect.count(table.name)).fetchone()[0]
            if int(count) > 0:
                return ApplyAction.SKIPPED

        run(lambda: adapter.insert_many(table.name, [dict(item) for item in table.items]))
        return ApplyAction.SEEDED


__all__ = [
    "SqlTableProcessor",
]

"""
Schema application engine for storage databases.

Manifesto:
    A table definition is applied the same way whatever holds the
    records. Backends with their own record operations (JSON files,
    memory) are seeded directly; SQL-backed storages are handed to the
    relational processor over their live adapter.

Architecture:
    ::

        process(table, database)
          │
          ├── supports_database? ── no ──▶ UnsupportedBackendError
          │
          └── apply_strategy(storage.kind)
                ├── DELEGATE ─▶ SqlTableProcessor.process(table, SqlDatabase(adapter))
                └── DIRECT
                      ├── dropping        ─▶ delete_table   [transaction?]
                      ├── items is None   ─▶ no-op
                      ├── !forcing, count>0 ─▶ skip
                      └── store(merge or items)             [transaction?]

Guardrails:
    ❌ DON'T: Deduplicate forced inserts, the merge is a plain concatenation
    ❌ DON'T: Swallow errors inside a transaction body
    ✅ DO: Surface every storage failure as ApplyError with the cause chained
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from contextlib import nullcontext
from typing import Any, assert_never

from storagedb.database import SqlDatabase
from storagedb.errors import ApplyError, StorageDbError, TableNotFoundError, UnsupportedBackendError
from storagedb.logging import get_logger
from storagedb.protocols import (
    DatabaseInterface,
    ProcessorInterface,
    Record,
    SqlCapableStorage,
    StorageDatabaseInterface,
    StorageInterface,
)
from storagedb.schema.table import Table
from storagedb.storage.base import ApplyStrategy, StorageBackendKind, apply_strategy

from .actions import ApplyAction
from .sql import SqlTableProcessor

logger = get_logger(__name__)


def merge_items(stored: Sequence[Record], items: Iterable[Record]) -> list[Record]:
    """Stored records followed by new items. Duplicates are kept."""
    return [dict(record) for record in stored] + [dict(item) for item in items]


class StorageDatabaseProcessor:
    """
    Applies table definitions to storage databases.

    Args:
        sql_processor: Relational processor for SQL-backed storages.
            Defaults to :class:`SqlTableProcessor`.
        backends: Backend kinds this processor accepts. Defaults to all.

    Example:
        >>> storage = InMemoryStorage()
        >>> database = StorageDatabase(storage, "storage")
        >>> table = Table("users").with_items([{"name": "John"}, {"name": "Mia"}])
        >>> StorageDatabaseProcessor().process(table, database)
        <ApplyAction.SEEDED: 'seeded'>
        >>> storage.count("users")
        2
    """

    def __init__(
        self,
        sql_processor: ProcessorInterface | None = None,
        *,
        backends: Iterable[StorageBackendKind] | None = None,
    ):
        self._sql_processor = sql_processor if sql_processor is not None else SqlTableProcessor()
        self._backends = frozenset(backends) if backends is not None else frozenset(StorageBackendKind)

    @property
    def backends(self) -> frozenset[StorageBackendKind]:
        return self._backends

    def supports_database(self, database: DatabaseInterface) -> bool:
        if not isinstance(database, StorageDatabaseInterface):
            return False
        kind = getattr(database.storage(), "kind", None)
        return isinstance(kind, StorageBackendKind) and kind in self._backends

    def process(self, table: Table, database: DatabaseInterface) -> ApplyAction:
        """Apply ``table`` to ``database``.

        Raises:
            UnsupportedBackendError: the database is not a storage database,
                or its backend is not accepted
            ApplyError: the storage or the relational processor failed
        """
        if not self.supports_database(database):
            raise UnsupportedBackendError(
                f"Database {database.name!r} is not supported by the storage processor"
            ).with_context(database=database.name, table=table.name)

        storage = database.storage()
        kind: StorageBackendKind = storage.kind
        log = logger.bind(table=table.name, database=database.name, backend=kind.value)

        match apply_strategy(kind):
            case ApplyStrategy.DELEGATE:
                return self._delegate(table, database, storage, log)
            case ApplyStrategy.DIRECT:
                return self._apply_direct(table, database, storage, log)
            case strategy:
                assert_never(strategy)

    # -- Delegate path -----------------------------------------------------

    def _delegate(
        self,
        table: Table,
        database: StorageDatabaseInterface,
        storage: StorageInterface,
        log: Any,
    ) -> ApplyAction:
        if not isinstance(storage, SqlCapableStorage):
            raise UnsupportedBackendError(
                f"Storage {storage.kind.value!r} of database {database.name!r} has no SQL adapter"
            ).with_context(database=database.name, table=table.name, backend=storage.kind.value)

        view = SqlDatabase(storage.database_adapter(), name=database.name)
        try:
            action = self._sql_processor.process(table, view)
        except ApplyError:
            raise
        except Exception as e:
            log.error("schema.delegate_failed", error=str(e))
            raise self._apply_error(table, database, storage, e) from e

        log.info("schema.delegated", action=getattr(action, "value", action))
        return action

    # -- Direct path -------------------------------------------------------

    def _apply_direct(
        self,
        table: Table,
        database: StorageDatabaseInterface,
        storage: StorageInterface,
        log: Any,
    ) -> ApplyAction:
        if table.dropping:
            self._run(table, database, storage, log, lambda: storage.delete_table(table.name))
            log.info("schema.dropped", with_transaction=table.with_transaction)
            return ApplyAction.DROPPED

        if table.items is None:
            log.debug("schema.unchanged")
            return ApplyAction.UNCHANGED

        if not table.forcing_insert:
            count = self._run(
                table, database, storage, log, lambda: self._count(table, storage), transactional=False
            )
            if count > 0:
                log.info("schema.seed_skipped", count=count)
                return ApplyAction.SKIPPED

        stored = self._run(table, database, storage, log, lambda: self._store(table, storage))
        log.info(
            "schema.seeded",
            items=len(table.items),
            stored=len(stored),
            forcing_insert=table.forcing_insert,
            with_transaction=table.with_transaction,
        )
        return ApplyAction.SEEDED

    def _store(self, table: Table, storage: StorageInterface) -> list[Record]:
        self._register(table, storage)
        items = table.items or []
        if table.forcing_insert:
            items = merge_items(self._fetch(table, storage), items)
        return storage.store_items(table.name, items)

    @staticmethod
    def _register(table: Table, storage: StorageInterface) -> None:
        if table.columns and not storage.tables.has(table.name):
            storage.tables.add(table.name, table.column_names, primary_key=table.primary_key)

    @staticmethod
    def _count(table: Table, storage: StorageInterface) -> int:
        # A collection that does not exist yet is empty for seeding purposes.
        try:
            return storage.count(table.name)
        except TableNotFoundError:
            return 0

    @staticmethod
    def _fetch(table: Table, storage: StorageInterface) -> list[Record]:
        try:
            return storage.fetch_items(table.name)
        except TableNotFoundError:
            return []

    def _run(
        self,
        table: Table,
        database: StorageDatabaseInterface,
        storage: StorageInterface,
        log: Any,
        work: Callable[[], Any],
        *,
        transactional: bool = True,
    ) -> Any:
        """Run ``work``, inside a storage transaction when the table asks for one."""
        boundary = storage.transaction() if transactional and table.with_transaction else nullcontext()
        try:
            with boundary:
                return work()
        except Exception as e:
            log.error("schema.apply_failed", error=str(e), error_type=type(e).__name__)
            raise self._apply_error(table, database, storage, e) from e

    @staticmethod
    def _apply_error(
        table: Table,
        database: DatabaseInterface,
        storage: StorageInterface,
        cause: Exception,
    ) -> ApplyError:
        operation = "drop" if table.dropping else "apply"
        error = ApplyError(
            f"Could not {operation} table {table.name!r} on database {database.name!r}: {cause}",
            cause=cause,
        ).with_context(database=database.name, table=table.name, backend=storage.kind.value)
        if isinstance(cause, StorageDbError):
            error.with_context(cause_category=cause.category.value)
        return error


__all__ = [
    "StorageDatabaseProcessor",
    "merge_items",
]

"""MySQL and MariaDB adapters.

Both speak the MySQL wire protocol through ``mysql.connector``
(``pip install storagedb[mysql]``). The driver is imported when the first
connection opens, so the package imports fine without it.
"""

from __future__ import annotations

from typing import Any

from storagedb.errors import ConfigurationError, DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


def _driver() -> Any:
    try:
        import mysql.connector
    except ImportError:
        raise ConfigurationError(
            "The mysql and mariadb backends need mysql-connector-python: pip install storagedb[mysql]"
        ) from None
    return mysql.connector


class MySQLAdapter(DatabaseAdapter):
    """Single-connection MySQL adapter with ``autocommit`` off."""

    server = DatabaseType.MYSQL

    def __init__(
        self,
        host: str = "localhost",
        port: int | None = None,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        timeout: float = 10.0,
    ):
        super().__init__(
            DatabaseConfig(
                db_type=self.server,
                host=host,
                port=port,
                database=database,
                username=username,
                password=password,
                charset=charset,
                timeout=timeout,
            )
        )

    def _open(self) -> Any:
        connector = _driver()
        cfg = self.config
        try:
            return connector.connect(
                host=cfg.host,
                port=cfg.server_port,
                database=cfg.database or None,
                user=cfg.username,
                password=cfg.password,
                charset=cfg.charset,
                connection_timeout=int(cfg.timeout),
                autocommit=False,
            )
        except connector.Error as e:
            raise DatabaseConnectionError(
                f"Cannot reach {cfg.db_type.value} at {cfg.redacted_url()}: {e}", cause=e
            ) from e


class MariaDBAdapter(MySQLAdapter):
    server = DatabaseType.MARIADB


__all__ = [
    "MySQLAdapter",
    "MariaDBAdapter",
]

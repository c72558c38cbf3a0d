"""SQL database adapters.

Architecture::

    DatabaseAdapter (base.py)     connection lifecycle, execute/query, transaction()
        |-- SQLiteAdapter         stdlib sqlite3
        |-- MySQLAdapter          mysql.connector (``mysql`` extra)
        |-- MariaDBAdapter        mysql.connector (``mysql`` extra)

    DatabaseConfig (types.py)     connection target, password redacted
    DatabaseType (types.py)       supported SQL databases
"""

from .base import DatabaseAdapter
from .mysql import MariaDBAdapter, MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "SQLiteAdapter",
    "MySQLAdapter",
    "MariaDBAdapter",
]

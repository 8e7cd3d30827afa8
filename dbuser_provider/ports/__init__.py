"""Public port exports for concrete adapter implementations."""

from .db_api import (
    DataSourceProvider,
    Database,
    DB2Dialect,
    Dialect,
    DriverConnectionSource,
    MySQLDialect,
    OracleDialect,
    PostgresDialect,
    SQLiteDialect,
    SQLServerDialect,
    get_dialect,
)

__all__ = [
    "DataSourceProvider",
    "Database",
    "DB2Dialect",
    "Dialect",
    "DriverConnectionSource",
    "MySQLDialect",
    "OracleDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "SQLServerDialect",
    "get_dialect",
]

"""DB-API adapter, connection source, and dialect exports."""

from .data_source import DataSourceProvider, DriverConnectionSource, parse_connection_url
from .database import Database
from .dialects import (
    DB2Dialect,
    Dialect,
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
    "parse_connection_url",
]

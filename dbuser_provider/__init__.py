"""Expose an external SQL database as a user directory for an identity provider."""

from .config import ProviderSettings, SettingKey
from .core import (
    ColumnMapping,
    CompiledQuery,
    ConfigurationError,
    DirectoryError,
    MalformedHashError,
    Pageable,
    QueryConfigurations,
    StorageError,
    UnsupportedOperationError,
    UserRepository,
    compile_search,
    hash_password,
    parse_column_mapping,
    render_columns,
    resolve_hash_algorithm,
    verify_password,
)
from .factory import UserStorageProviderFactory
from .ports import DataSourceProvider, Database, Dialect, SQLiteDialect, get_dialect

__all__ = [
    "ColumnMapping",
    "CompiledQuery",
    "ConfigurationError",
    "DataSourceProvider",
    "Database",
    "Dialect",
    "DirectoryError",
    "MalformedHashError",
    "Pageable",
    "ProviderSettings",
    "QueryConfigurations",
    "SQLiteDialect",
    "SettingKey",
    "StorageError",
    "UnsupportedOperationError",
    "UserRepository",
    "UserStorageProviderFactory",
    "compile_search",
    "get_dialect",
    "hash_password",
    "parse_column_mapping",
    "render_columns",
    "resolve_hash_algorithm",
    "verify_password",
]

"""Public core API for query compilation, hashing, and the user repository."""

from .column_mapping import ColumnMapping, parse_column_mapping
from .errors import (
    ConfigurationError,
    DirectoryError,
    MalformedHashError,
    StorageError,
    UnsupportedOperationError,
)
from .hashing import (
    Argon2Algorithm,
    BcryptAlgorithm,
    DigestAlgorithm,
    HashAlgorithm,
    Pbkdf2Algorithm,
    hash_password,
    resolve_hash_algorithm,
    verify_password,
)
from .paging import Pageable, format_with_pageable
from .query_config import QueryConfigurations
from .repository import QueryResult, UserRepository
from .search import EXACT, SEARCH, CompiledQuery, compile_search
from .templating import render_columns

__all__ = [
    "Argon2Algorithm",
    "BcryptAlgorithm",
    "ColumnMapping",
    "CompiledQuery",
    "ConfigurationError",
    "DigestAlgorithm",
    "DirectoryError",
    "EXACT",
    "HashAlgorithm",
    "MalformedHashError",
    "Pageable",
    "Pbkdf2Algorithm",
    "QueryConfigurations",
    "QueryResult",
    "SEARCH",
    "StorageError",
    "UnsupportedOperationError",
    "UserRepository",
    "compile_search",
    "format_with_pageable",
    "hash_password",
    "parse_column_mapping",
    "render_columns",
    "resolve_hash_algorithm",
    "verify_password",
]

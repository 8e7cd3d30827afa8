"""Core port contracts used by adapters and repository."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol


class DialectPort(Protocol):
    """Database family behavior required by query execution and paging."""

    name: str
    description: str
    paramstyle: str
    test_query: str

    def placeholder(self, index: int) -> str: ...

    def bind_markers(self, sql: str) -> str: ...

    def limit_offset_sql(self, sql: str, limit: int, offset: int) -> str: ...


class ConnectionSource(Protocol):
    """External source of DB-API connections (a pool or a plain driver).

    `connection()` must release the connection on every exit path.
    """

    def connection(self) -> AbstractContextManager[Any]: ...

    def close(self) -> None: ...

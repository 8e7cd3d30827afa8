"""User repository: executes compiled directory queries against the database."""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Generic, List, Optional, TypeVar

from ..ports.db_api.data_source import DataSourceProvider
from ..ports.db_api.database import Database
from .errors import StorageError, UnsupportedOperationError
from .hashing import verify_password
from .paging import Pageable, format_with_pageable
from .query_config import QueryConfigurations
from .types import QueryParams, RowMapping, SearchCriteria, UserRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Outcome of one read: a value, or the error that made the source unavailable."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def available(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: Optional[T]) -> QueryResult[T]:
        return cls(value=value)

    @classmethod
    def unavailable(cls, error: BaseException) -> QueryResult[T]:
        return cls(error=error)

    def or_else(self, default: T) -> T:
        return default if self.value is None else self.value


class UserRepository:
    """Directory operations over a configured data source.

    Read operations never raise on database failures: they log the error and
    answer as if nothing matched. Credential updates raise instead.
    """

    def __init__(self, data_source: DataSourceProvider, config: QueryConfigurations):
        self.data_source = data_source
        self.config = config

    def _query(
        self,
        sql: str,
        read: Callable[[Database, str, QueryParams], T],
        params: QueryParams = None,
        pageable: Optional[Pageable] = None,
    ) -> QueryResult[T]:
        source = self.data_source.get()
        if source is None:
            return QueryResult.unavailable(RuntimeError("No connection source is configured."))
        try:
            with source.connection() as conn:
                sql = format_with_pageable(sql, pageable, self.config.dialect)
                logger.info("Query: %s params: %s", sql, params)
                return QueryResult.ok(read(Database(conn, self.config.dialect), sql, params))
        except Exception as exc:
            logger.exception("Query failed: %s", sql)
            return QueryResult.unavailable(exc)

    @staticmethod
    def _read_records(db: Database, sql: str, params: QueryParams) -> List[UserRecord]:
        records = [_to_record(row) for row in db.fetchall(sql, params)]
        logger.info("Result count: %d", len(records))
        return records

    @staticmethod
    def _read_int(db: Database, sql: str, params: QueryParams) -> Optional[int]:
        value = db.scalar(sql, params)
        return None if value is None else int(value)

    @staticmethod
    def _read_str(db: Database, sql: str, params: QueryParams) -> Optional[str]:
        value = db.scalar(sql, params)
        return None if value is None else _stringify(value)

    def get_all_users(self) -> List[UserRecord]:
        query = self.config.search()
        return self._query(query.sql, self._read_records, query.params).or_else([])

    def get_users_count(self, criteria: Optional[SearchCriteria] = None) -> int:
        if not criteria:
            return self._query(self.config.count_query(), self._read_int).or_else(0)
        query = self.config.search(criteria)
        sql = f"select count(*) from ({query.sql}) count"
        return self._query(sql, self._read_int, query.params).or_else(0)

    @staticmethod
    def _read_record(db: Database, sql: str, params: QueryParams) -> Optional[UserRecord]:
        row = db.fetchone(sql, params)
        return None if row is None else _to_record(row)

    def _first(self, sql: str, value: str) -> Optional[UserRecord]:
        return self._query(sql, self._read_record, [value]).value

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._first(self.config.find_by_id_query(), user_id)

    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        return self._first(self.config.find_by_username_query(), username)

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        return self._first(self.config.find_by_email_query(), email)

    def find_users(
        self,
        criteria: Optional[SearchCriteria] = None,
        pageable: Optional[Pageable] = None,
    ) -> List[UserRecord]:
        """Search users; `pageable=None` returns every match."""

        query = self.config.search(criteria)
        return self._query(query.sql, self._read_records, query.params, pageable).or_else([])

    def validate_credentials(self, username: str, password: str) -> bool:
        """Check `password` against the stored hash for `username`.

        Raises:
            MalformedHashError: The stored PBKDF2 value is not well formed.
        """

        template = self.config.find_password_hash
        if not template or not template.strip():
            logger.warning("No password hash query is configured; rejecting credentials.")
            return False
        stored = self._query(template, self._read_str, [username]).or_else("")
        return verify_password(stored, password, self.config.hash_algorithm)

    def update_credentials(self, username: str, password: str) -> bool:
        """Store a new hash for `username`.

        Returns True when a row was updated, or when the driver cannot report
        the affected row count.

        Raises:
            UnsupportedOperationError: No update template is configured.
            StorageError: The update could not be executed.
        """

        if not self.config.can_update_password:
            raise UnsupportedOperationError("Password update not supported.")
        source = self.data_source.get()
        if source is None:
            raise StorageError("No connection source is configured.")
        new_hash = self.config.hash_algorithm.hash(password)
        sql = self.config.update_password
        logger.info("Updating password hash for %s: %s", username, sql)
        try:
            with source.connection() as conn:
                updated = Database(conn, self.config.dialect).update(sql, [new_hash, username])
        except Exception as exc:
            raise StorageError(f"Password update failed for {username!r}.") from exc
        return updated != 0

    def remove_user(self) -> bool:
        """Whether the host may delete its own copy of a user (no database delete)."""

        return self.config.allow_keycloak_delete


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _to_record(row: RowMapping) -> UserRecord:
    return {str(label): None if value is None else _stringify(value) for label, value in row.items()}

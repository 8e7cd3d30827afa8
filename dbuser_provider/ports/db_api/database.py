"""DB-API adapter used by the repository for one borrowed connection."""

from __future__ import annotations

import contextlib
from typing import Any, Mapping, Optional

from ...core.contracts import DialectPort
from ...core.types import MaybeRow, QueryParams, RowMapping, Rows


class Database:
    """Thin DB-API wrapper that normalizes execute and row mapping behavior.

    Statements are written with `?` markers; the dialect rewrites them for the
    driver before execution.
    """

    def __init__(self, conn: Any, dialect: DialectPort):
        """Create database adapter.

        Args:
            conn: Open DB-API connection object. The caller owns its lifetime.
            dialect: Database family the connection belongs to.
        """

        self.conn = conn
        self.dialect = dialect

    @contextlib.contextmanager
    def transaction(self):
        """Provide commit/rollback transaction scope."""

        try:
            yield
            self.conn.commit()
        except BaseException:
            self.conn.rollback()
            raise

    def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional positional parameters and return cursor."""

        cur = self.conn.cursor()
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(self.dialect.bind_markers(sql), list(params))
        except BaseException:
            close = getattr(cur, "close", None)
            if callable(close):
                close()
            raise
        return cur

    def _row_to_mapping(self, cursor: Any, row: Any) -> RowMapping:
        """Normalize row object to mapping.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`, keyed by the column label the driver reports.
        """

        if isinstance(row, Mapping):
            return row

        if isinstance(row, (tuple, list)):
            desc = getattr(cursor, "description", None)
            if not desc:
                raise TypeError(
                    "Cursor has no description; cannot map tuple rows to dict."
                )
            cols = [d[0] for d in desc]
            return dict(zip(cols, row))

        keys = getattr(row, "keys", None)
        if callable(keys):
            return {key: row[key] for key in keys()}

        raise TypeError(f"Unsupported row type: {type(row)}")

    def fetchall(self, sql: str, params: QueryParams = None) -> Rows:
        """Execute query and return all rows as normalized mappings."""

        cur = self.execute(sql, params)
        try:
            return [self._row_to_mapping(cur, r) for r in cur.fetchall()]
        finally:
            _close_cursor(cur)

    def fetchone(self, sql: str, params: QueryParams = None) -> MaybeRow:
        """Execute query and return the first row as a mapping."""

        cur = self.execute(sql, params)
        try:
            row = cur.fetchone()
            return None if row is None else self._row_to_mapping(cur, row)
        finally:
            _close_cursor(cur)

    def scalar(self, sql: str, params: QueryParams = None) -> Optional[Any]:
        """Execute query and return the first column of the first row."""

        cur = self.execute(sql, params)
        try:
            row = cur.fetchone()
        finally:
            _close_cursor(cur)
        if row is None:
            return None
        if isinstance(row, Mapping):
            return next(iter(row.values()), None)
        return row[0]

    def update(self, sql: str, params: QueryParams = None) -> int:
        """Execute a write inside a transaction and return the affected row count.

        Returns -1 when the driver cannot report the count.
        """

        with self.transaction():
            cur = self.execute(sql, params)
            try:
                rowcount = getattr(cur, "rowcount", None)
                return -1 if rowcount is None else int(rowcount)
            finally:
                _close_cursor(cur)


def _close_cursor(cur: Any) -> None:
    close = getattr(cur, "close", None)
    if callable(close):
        close()

from __future__ import annotations

import sqlite3
import unittest

from dbuser_provider.ports.db_api.database import Database
from dbuser_provider.ports.db_api.dialects import PostgresDialect, SQLiteDialect


class _DummyCursor:
    def __init__(self, description=None):
        self.description = description


class _RecordingCursor:
    def __init__(self, conn, fail: bool = False, rowcount=2):  # noqa: ANN001
        self._conn = conn
        self._fail = fail
        self.closed = False
        self.rowcount = rowcount

    def execute(self, sql, params=None):  # noqa: ANN001,ANN201
        self._conn.executed.append((sql, params))
        if self._fail:
            raise RuntimeError("boom")

    def fetchone(self):  # noqa: ANN201
        return None

    def close(self) -> None:
        self.closed = True


class _RecordingConnection:
    def __init__(self, fail: bool = False, rowcount=2):  # noqa: ANN001
        self.fail = fail
        self.rowcount = rowcount
        self.executed = []
        self.cursors = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self) -> _RecordingCursor:
        cur = _RecordingCursor(self, self.fail, self.rowcount)
        self.cursors.append(cur)
        return cur

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class _KeysRow:
    def __init__(self, data):
        self._data = data

    def keys(self):  # noqa: ANN201
        return list(self._data)

    def __getitem__(self, key):  # noqa: ANN001,ANN204
        return self._data[key]


class RowMappingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = Database(None, SQLiteDialect())

    def test_mapping_row_is_returned_as_is(self) -> None:
        row = {"id": 1}
        self.assertIs(self.db._row_to_mapping(_DummyCursor(), row), row)  # noqa: SLF001

    def test_tuple_row_uses_description_labels(self) -> None:
        cursor = _DummyCursor(description=[("id",), ("username",)])
        self.assertEqual(
            self.db._row_to_mapping(cursor, (1, "alice")),  # noqa: SLF001
            {"id": 1, "username": "alice"},
        )

    def test_tuple_row_without_description_raises(self) -> None:
        with self.assertRaises(TypeError):
            self.db._row_to_mapping(_DummyCursor(), (1,))  # noqa: SLF001

    def test_row_with_keys(self) -> None:
        row = _KeysRow({"email": "a@b.c"})
        self.assertEqual(self.db._row_to_mapping(_DummyCursor(), row), {"email": "a@b.c"})  # noqa: SLF001

    def test_unsupported_row_raises(self) -> None:
        with self.assertRaises(TypeError):
            self.db._row_to_mapping(_DummyCursor(), 42)  # noqa: SLF001


class ExecuteTests(unittest.TestCase):
    def test_markers_are_rewritten_only_with_params(self) -> None:
        conn = _RecordingConnection()
        db = Database(conn, PostgresDialect())
        db.scalar("select 1 where name like 'a%'")
        db.scalar("select 1 from t where a = ? and b like '%x'", ["v"])
        self.assertEqual(
            conn.executed,
            [
                ("select 1 where name like 'a%'", None),
                ("select 1 from t where a = %s and b like '%%x'", ["v"]),
            ],
        )
        self.assertTrue(all(cur.closed for cur in conn.cursors))

    def test_cursor_closed_when_execute_fails(self) -> None:
        conn = _RecordingConnection(fail=True)
        with self.assertRaises(RuntimeError):
            Database(conn, SQLiteDialect()).fetchall("select 1")
        self.assertTrue(conn.cursors[0].closed)

    def test_update_commits_and_returns_rowcount(self) -> None:
        conn = _RecordingConnection()
        self.assertEqual(Database(conn, SQLiteDialect()).update("update t set a = ?", ["x"]), 2)
        self.assertEqual((conn.commits, conn.rollbacks), (1, 0))

    def test_update_reports_unknown_rowcount(self) -> None:
        for rowcount in (-1, None):
            with self.subTest(rowcount=rowcount):
                conn = _RecordingConnection(rowcount=rowcount)
                self.assertEqual(Database(conn, SQLiteDialect()).update("update t set a = ?", ["x"]), -1)
                self.assertEqual(conn.commits, 1)

    def test_update_rolls_back_on_failure(self) -> None:
        conn = _RecordingConnection(fail=True)
        with self.assertRaises(RuntimeError):
            Database(conn, SQLiteDialect()).update("update t set a = ?", ["x"])
        self.assertEqual((conn.commits, conn.rollbacks), (0, 1))


class SqliteAdapterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.conn = sqlite3.connect(":memory:")
        self.conn.execute("CREATE TABLE t (id INTEGER, name TEXT)")
        self.conn.executemany("INSERT INTO t VALUES (?, ?)", [(1, "a"), (2, "b")])
        self.conn.commit()
        self.db = Database(self.conn, SQLiteDialect())

    def tearDown(self) -> None:
        self.conn.close()

    def test_fetchall_and_fetchone(self) -> None:
        self.assertEqual(
            self.db.fetchall("select id, name as label from t order by id"),
            [{"id": 1, "label": "a"}, {"id": 2, "label": "b"}],
        )
        self.assertEqual(self.db.fetchone("select name from t where id = ?", [2]), {"name": "b"})
        self.assertIsNone(self.db.fetchone("select name from t where id = ?", [9]))

    def test_scalar(self) -> None:
        self.assertEqual(self.db.scalar("select count(*) from t"), 2)
        self.assertIsNone(self.db.scalar("select name from t where id = ?", [9]))

    def test_update_is_committed(self) -> None:
        self.assertEqual(self.db.update("update t set name = ? where id = ?", ["z", 1]), 1)
        other = Database(self.conn, SQLiteDialect())
        self.assertEqual(other.scalar("select name from t where id = 1"), "z")


if __name__ == "__main__":
    unittest.main()

"""SQLite storage adapter for intervals, categories and options."""

import logging
import sqlite3
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Iterator

from ttjr.core.errors import DuplicateError, NotFoundError, StorageError
from ttjr.core.intervals import Interval

logger = logging.getLogger(__name__)

try:
    DB_VERSION = version("ttjr")
except PackageNotFoundError:
    DB_VERSION = "0.0.0"

MEMORY = ":memory:"

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS options (
        name TEXT PRIMARY KEY,
        value TEXT NOT NULL
    );

    -- rowid keeps insertion order
    CREATE TABLE IF NOT EXISTS categories (
        name TEXT PRIMARY KEY
    );

    -- category is not a foreign key: deleting a category leaves its times alone
    CREATE TABLE IF NOT EXISTS times (
        id INTEGER PRIMARY KEY,
        category TEXT NOT NULL,
        start_time INTEGER NOT NULL,
        end_time INTEGER
    );
    CREATE INDEX IF NOT EXISTS idx_times_start ON times(start_time);
    CREATE INDEX IF NOT EXISTS idx_times_end ON times(end_time);
"""


def _row_to_interval(row: sqlite3.Row) -> Interval:
    return Interval(
        id=row["id"],
        category=row["category"],
        start_time=row["start_time"],
        end_time=row["end_time"],
    )


class SqliteIntervalStore:
    """
    SQLite-backed store.

    Implements IntervalStore protocol. The connection runs in autocommit
    mode so each statement is its own transaction unless grouped with
    ``transaction()``.
    """

    def __init__(self, db_path: Path | str = MEMORY):
        """
        Open (and initialise if needed) the database.

        Args:
            db_path: Path to the SQLite file, or ``:memory:``.
        """
        if str(db_path) != MEMORY:
            db_path = Path(db_path).expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self._depth = 0

        try:
            self._conn = sqlite3.connect(str(db_path), isolation_level=None)
        except sqlite3.Error as e:
            raise StorageError(f"Couldn't open database {db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row
        self._init_db()

    def _init_db(self) -> None:
        """Create the schema and record the database version."""
        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise StorageError(f"Failed to initialize database: {e}") from e
        # Only write when it changed, so opening the file leaves its mtime alone
        if self.get_options().get("dbversion") != DB_VERSION:
            self.set_option("dbversion", DB_VERSION)

    def _execute(self, sql: str, params: tuple | dict = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed calls in one transaction. Nested calls join the outer one."""
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._execute("BEGIN")
        self._depth = 1
        try:
            yield
        except BaseException:
            self._depth = 0
            self._conn.rollback()
            raise
        self._depth = 0
        try:
            self._conn.commit()
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StorageError(f"Commit failed: {e}") from e

    def close(self) -> None:
        self._conn.close()

    # ============== Intervals ==============

    def insert_interval(self, category: str, start_time: int, end_time: int | None = None) -> Interval:
        cursor = self._execute(
            "INSERT INTO times (category, start_time, end_time) VALUES (?, ?, ?)",
            (category, start_time, end_time),
        )
        return Interval(cursor.lastrowid, category, start_time, end_time)

    def update_interval(self, interval: Interval) -> None:
        cursor = self._execute(
            "UPDATE times SET category = ?, start_time = ?, end_time = ? WHERE id = ?",
            (interval.category, interval.start_time, interval.end_time, interval.id),
        )
        if cursor.rowcount == 0:
            raise NotFoundError(f"Invalid time ID {interval.id}")

    def delete_interval(self, interval_id: int) -> bool:
        cursor = self._execute("DELETE FROM times WHERE id = ?", (interval_id,))
        return cursor.rowcount > 0

    def get_interval(self, interval_id: int) -> Interval | None:
        row = self._execute("SELECT * FROM times WHERE id = ?", (interval_id,)).fetchone()
        return _row_to_interval(row) if row else None

    def open_intervals(self) -> list[Interval]:
        cursor = self._execute(
            "SELECT * FROM times WHERE end_time IS NULL ORDER BY start_time DESC, id DESC"
        )
        return [_row_to_interval(row) for row in cursor.fetchall()]

    def query_intervals(self, start: int | None = None, end: int | None = None) -> Iterator[Interval]:
        clauses = []
        params: list[Any] = []
        if start is not None:
            clauses.append("start_time >= ?")
            params.append(start)
        if end is not None:
            clauses.append("start_time < ?")
            params.append(end)

        query = "SELECT id, category, start_time, end_time FROM times"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY id"

        cursor = self._execute(query, tuple(params))
        try:
            for row in cursor:
                yield _row_to_interval(row)
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def delete_intervals_between(self, start: int, end: int, inclusive: bool = True) -> int:
        if inclusive:
            where = (
                "(start_time >= :start AND start_time <= :end)"
                " OR (end_time >= :start AND end_time <= :end)"
            )
        else:
            where = "start_time >= :start AND end_time <= :end"
        cursor = self._execute(f"DELETE FROM times WHERE {where}", {"start": start, "end": end})
        return cursor.rowcount

    # ============== Categories ==============

    def list_categories(self) -> list[str]:
        cursor = self._execute("SELECT name FROM categories ORDER BY rowid")
        return [row["name"] for row in cursor.fetchall()]

    def add_category(self, name: str) -> None:
        try:
            self._conn.execute("INSERT INTO categories (name) VALUES (?)", (name,))
        except sqlite3.IntegrityError as e:
            raise DuplicateError(f"Category '{name}' already exists") from e
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def delete_category(self, name: str, delete_logged_times: bool = False) -> bool:
        with self.transaction():
            exists = self._execute("SELECT 1 FROM categories WHERE name = ?", (name,)).fetchone()
            if exists is None:
                return False
            if delete_logged_times:
                deleted = self._execute("DELETE FROM times WHERE category = ?", (name,)).rowcount
                logger.debug(f"Deleted {deleted} times logged against '{name}'")
            cursor = self._execute("DELETE FROM categories WHERE name = ?", (name,))
        return cursor.rowcount > 0

    def rename_category(self, old: str, new: str) -> None:
        with self.transaction():
            try:
                self._conn.execute("UPDATE categories SET name = ? WHERE name = ?", (new, old))
            except sqlite3.IntegrityError as e:
                raise DuplicateError(f"Category '{new}' already exists") from e
            except sqlite3.Error as e:
                raise StorageError(str(e)) from e
            self._execute("UPDATE times SET category = ? WHERE category = ?", (new, old))

    # ============== Options ==============

    def get_options(self) -> dict[str, str]:
        cursor = self._execute("SELECT name, value FROM options ORDER BY name")
        return {row["name"]: row["value"] for row in cursor.fetchall()}

    def set_option(self, name: str, value: str) -> None:
        self._execute("REPLACE INTO options (name, value) VALUES (?, ?)", (name, value))

    def unset_option(self, name: str) -> bool:
        cursor = self._execute("DELETE FROM options WHERE name = ?", (name,))
        return cursor.rowcount > 0

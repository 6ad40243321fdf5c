# stickytodo/storage.py
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from stickytodo.config import NOTE_ID, default_database_path
from stickytodo.exceptions import StorageError
from stickytodo.logging_config import get_logger

logger = get_logger(__name__)

# Columns added after the first release. Upgrades only ever append.
TODO_COLUMN_UPGRADES = [
    ("parent_id", "INTEGER"),
    ("position", "INTEGER DEFAULT 0"),
    ("target_count", "INTEGER"),
    ("current_count", "INTEGER DEFAULT 0"),
]


class Database:
    """
    Owns the single SQLite connection shared by the note and todo stores.

    Every public store operation takes ``lock`` for its whole
    read-validate-write sequence, so the cascade and sibling-shift
    algorithms never observe a half-applied mutation.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else default_database_path()
        self.lock = threading.RLock()
        self._conn: Optional[sqlite3.Connection] = None
        self._depth = 0

    def connect(self) -> sqlite3.Connection:
        """Opens the connection on first use and creates the tables."""
        with self.lock:
            if self._conn is not None:
                return self._conn
            try:
                if str(self.path) != ":memory:":
                    self.path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self.path), check_same_thread=False, isolation_level=None)
            except (sqlite3.Error, OSError) as e:
                raise StorageError(f"Could not open database at {self.path}: {e}") from e
            conn.row_factory = sqlite3.Row
            self._conn = conn
            logger.info("Database path: %s", self.path)
            try:
                conn.execute("PRAGMA foreign_keys = ON")
                self.create_tables()
            except StorageError:
                self.close()
                raise
            return conn

    def close(self) -> None:
        with self.lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Runs the enclosed statements as one atomic unit.

        Nested calls join the outermost transaction; only the outermost one
        commits or rolls back.
        """
        with self.lock:
            conn = self.connect()
            outermost = self._depth == 0
            try:
                if outermost:
                    conn.execute("BEGIN IMMEDIATE")
                self._depth += 1
                try:
                    yield conn
                finally:
                    self._depth -= 1
                if outermost:
                    conn.execute("COMMIT")
            except sqlite3.Error as e:
                if outermost and conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise StorageError(f"Database error: {e}") from e
            except BaseException:
                if outermost and conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def query(self, sql: str, params: tuple = ()) -> list:
        """Runs a read-only statement and returns all rows."""
        with self.lock:
            conn = self.connect()
            try:
                return conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Database error: {e}") from e

    def create_tables(self) -> None:
        """
        Creates the tables if they don't exist and appends any columns an
        older database file is missing.
        """
        conn = self._conn
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS notes (
                    id INTEGER PRIMARY KEY,
                    content TEXT
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS todos (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    text TEXT NOT NULL,
                    completed BOOLEAN NOT NULL,
                    parent_id INTEGER,
                    position INTEGER DEFAULT 0,
                    target_count INTEGER,
                    current_count INTEGER DEFAULT 0,
                    FOREIGN KEY (parent_id) REFERENCES todos(id) ON DELETE CASCADE
                )
            """)

            for column, definition in TODO_COLUMN_UPGRADES:
                try:
                    conn.execute(f"ALTER TABLE todos ADD COLUMN {column} {definition}")
                    logger.info("Added column '%s' to todos", column)
                except sqlite3.OperationalError as e:
                    if f"duplicate column name: {column}" not in str(e):
                        raise

            conn.execute("CREATE INDEX IF NOT EXISTS idx_todos_parent ON todos (parent_id, position)")
            self._compact_positions(conn)
            conn.execute("INSERT OR IGNORE INTO notes (id, content) VALUES (?, '')", (NOTE_ID,))
        except sqlite3.Error as e:
            raise StorageError(f"Could not initialise database: {e}") from e

    @staticmethod
    def _compact_positions(conn: sqlite3.Connection) -> None:
        """
        Renumbers every sibling group to 0..k-1, keeping its current order.

        Files written before the position column existed, or by releases that
        started at 1 and never closed gaps on delete, are brought into shape
        here. Groups that are already dense are left alone.
        """
        rows = conn.execute(
            "SELECT id, parent_id, position FROM todos "
            "ORDER BY parent_id IS NOT NULL, parent_id, COALESCE(position, 0), id"
        ).fetchall()
        updates = []
        index = 0
        previous_parent = object()
        for row in rows:
            if row["parent_id"] != previous_parent:
                previous_parent = row["parent_id"]
                index = 0
            if row["position"] != index:
                updates.append((index, row["id"]))
            index += 1
        if not updates:
            return
        conn.execute("BEGIN IMMEDIATE")
        try:
            conn.executemany("UPDATE todos SET position = ? WHERE id = ?", updates)
            conn.execute("COMMIT")
        except sqlite3.Error:
            conn.execute("ROLLBACK")
            raise
        logger.info("Renumbered %d todo position(s)", len(updates))

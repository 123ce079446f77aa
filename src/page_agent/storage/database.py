"""
SQLite store for the task board and page captures.

A Database owns one sqlite3 connection per calling thread, so the
FastAPI threadpool and the CLI can share an instance. Statements that
fail are re-raised as DatabaseError carrying the offending SQL.
"""

import re
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from page_agent.config import Settings
from page_agent.core.exceptions import DatabaseError
from page_agent.storage.schema import SchemaManager
from page_agent.utils.logging import get_logger

logger = get_logger(__name__)

IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

SQLITE_PAGE_SIZE = 4096


def _quote_identifier(name: str) -> str:
    # Table and column names are interpolated, never bound
    if not IDENTIFIER_RE.match(name):
        raise DatabaseError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


class Database:
    """
    Thread-aware SQLite access for Page Agent.

    Build one with Database.create(settings) and pass it to
    TaskRepository and CaptureRepository. Close it when the CLI
    command or the API process ends.

    Example:
        >>> db = Database.create(settings)
        >>> db.fetch_all("SELECT id, title FROM tasks WHERE status = ?", ("backlog",))
        >>> db.close()
    """

    def __init__(
        self,
        database_path: Path,
        wal_mode: bool = True,
        cache_size_mb: int = 16,
    ) -> None:
        self.database_path = Path(database_path)
        self.wal_mode = wal_mode
        self.cache_size_mb = cache_size_mb

        self._connections: dict[int, sqlite3.Connection] = {}
        self._lock = threading.Lock()
        self._initialized = False

    @classmethod
    def create(cls, settings: Settings) -> "Database":
        """
        Open the database described by settings.storage and apply the schema.

        Raises:
            DatabaseError: If the file or its directory cannot be prepared
        """
        storage = settings.storage
        database = cls(
            database_path=storage.database_path,
            wal_mode=storage.wal_mode,
            cache_size_mb=storage.cache_size_mb,
        )
        database.setup()
        return database

    def setup(self) -> None:
        """Ensure the parent directory exists and the schema is current."""
        try:
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DatabaseError(
                f"Cannot create database directory: {e}",
                details={"path": str(self.database_path)},
            ) from e

        try:
            SchemaManager(self.connection()).initialize()
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Schema initialization failed: {e}",
                details={"path": str(self.database_path)},
            ) from e

        self._initialized = True
        logger.info(f"Database ready at {self.database_path}")

    def connection(self) -> sqlite3.Connection:
        """Return the connection bound to the calling thread, opening it on first use."""
        thread_id = threading.get_ident()
        conn = self._connections.get(thread_id)
        if conn is None:
            with self._lock:
                conn = self._connections.get(thread_id)
                if conn is None:
                    conn = self._open()
                    self._connections[thread_id] = conn
        return conn

    def _open(self) -> sqlite3.Connection:
        journal = "WAL" if self.wal_mode else "DELETE"
        cache_pages = (self.cache_size_mb * 1024 * 1024) // SQLITE_PAGE_SIZE

        try:
            conn = sqlite3.connect(
                str(self.database_path),
                check_same_thread=False,
                timeout=30.0,
            )
            conn.row_factory = sqlite3.Row
            conn.execute(f"PRAGMA journal_mode = {journal}")
            conn.execute(f"PRAGMA cache_size = -{cache_pages}")
            conn.execute("PRAGMA synchronous = NORMAL")
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to open database: {e}",
                details={"path": str(self.database_path)},
            ) from e

        logger.debug(f"Opened connection for thread {threading.get_ident()}")
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield the thread's connection; commit on exit, roll back on any exception."""
        conn = self.connection()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        conn.commit()

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self.connection().execute(sql, params)
        except sqlite3.Error as e:
            raise DatabaseError(f"Query execution failed: {e}", query=sql) from e

    def fetch_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        row = self.execute(sql, params).fetchone()
        return dict(row) if row is not None else None

    def fetch_all(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        return [dict(row) for row in self.execute(sql, params).fetchall()]

    def insert(self, table: str, values: dict[str, Any]) -> int:
        """
        Insert one row.

        Args:
            table: Target table
            values: Column to value mapping

        Returns:
            The new rowid
        """
        columns = ", ".join(_quote_identifier(column) for column in values)
        placeholders = ", ".join("?" for _ in values)
        sql = f"INSERT INTO {_quote_identifier(table)} ({columns}) VALUES ({placeholders})"

        with self.transaction():
            cursor = self.execute(sql, tuple(values.values()))
        return cursor.lastrowid

    def update_by_id(self, table: str, row_id: Any, values: dict[str, Any]) -> int:
        """
        Set columns on the row whose id matches.

        Returns:
            Number of rows changed, 0 when the id is unknown
        """
        if not values:
            return 0

        assignments = ", ".join(f"{_quote_identifier(column)} = ?" for column in values)
        sql = f"UPDATE {_quote_identifier(table)} SET {assignments} WHERE id = ?"

        with self.transaction():
            cursor = self.execute(sql, (*values.values(), row_id))
        return cursor.rowcount

    def delete_by_id(self, table: str, row_id: Any) -> int:
        """Delete the row whose id matches and return the number removed."""
        sql = f"DELETE FROM {_quote_identifier(table)} WHERE id = ?"
        with self.transaction():
            cursor = self.execute(sql, (row_id,))
        return cursor.rowcount

    def close(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                try:
                    conn.close()
                except sqlite3.Error as e:
                    logger.warning(f"Error closing connection: {e}")
            self._connections.clear()

        logger.info(f"Closed database at {self.database_path}")

    def __repr__(self) -> str:
        state = "initialized" if self._initialized else "not initialized"
        return f"Database(path={self.database_path!r}, {state})"

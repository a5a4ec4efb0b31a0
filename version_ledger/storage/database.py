"""
Backing store contract and SQLite implementation for Version Ledger.

The ledger never talks to a driver directly. It is handed a
DatabaseProvider: anything with the five operations below. Two providers ship
with the package:

- SQLiteDatabase: file-backed (or ":memory:") SQLite via the stdlib driver
- InMemoryDatabase (storage/memory.py): dict-backed, for tests

Providers report failures by raising ``sqlite3.Error`` subclasses. Converting
those into DatabaseIOError is the ledger's job, not the provider's.

Example usage:
    >>> from version_ledger.storage.database import SQLiteDatabase
    >>> db = SQLiteDatabase("./output/versions.db")
    >>> db.table_exists("ExoPlayerVersions")
    False

Security:
    - ALL values are bound as query parameters
    - Table and column identifiers are quoted
"""

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# Prefix shared by every table the media database owns
TABLE_PREFIX = "ExoPlayer"

IN_MEMORY_PATH = ":memory:"

DEFAULT_TIMEOUT_SECONDS = 5.0


class DatabaseProvider(Protocol):
    """Minimal relational store the ledger runs against."""

    def execute(self, statement: str) -> None:
        """Run a DDL/DML statement that returns no rows."""
        ...

    def upsert(self, table: str, row: dict[str, Any]) -> None:
        """Insert ``row``, replacing any row with the same unique key."""
        ...

    def delete(self, table: str, where: str, params: Sequence[Any]) -> int:
        """Delete rows matching ``where``; returns the number deleted."""
        ...

    def query(
        self,
        table: str,
        columns: Sequence[str],
        where: str | None = None,
        params: Sequence[Any] = (),
        order_by: str | None = None,
    ) -> list[tuple]:
        """Return rows matching ``where`` (all rows when None)."""
        ...

    def table_exists(self, table: str) -> bool:
        """Return True if ``table`` has been created."""
        ...


def quote_identifier(name: str) -> str:
    """Quote an SQL identifier, escaping embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    """
    Check whether a table exists in an open SQLite connection.

    Probes sqlite_master instead of relying on "no such table" errors, whose
    wording and type vary between engines.
    """
    cursor = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
        (table,),
    )
    return cursor.fetchone() is not None


class SQLiteDatabase:
    """
    DatabaseProvider backed by a SQLite file.

    Each operation opens its own connection, commits on success and rolls back
    on error, so one instance can be shared between threads. The special path
    ":memory:" keeps a single shared connection instead, since an in-memory
    database disappears with its connection.

    Args:
        db_path: Filesystem path to the SQLite file, or ":memory:".
                 Parent directories are created if missing.
        timeout: Seconds to wait on a locked database before failing.

    Example:
        >>> with SQLiteDatabase("./output/versions.db") as db:
        ...     db.execute("CREATE TABLE IF NOT EXISTS t (x INTEGER)")
    """

    def __init__(self, db_path: str | Path, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.db_path = str(db_path)
        self.timeout = timeout
        self._shared_conn: sqlite3.Connection | None = None

        if self.db_path == IN_MEMORY_PATH:
            self._shared_conn = sqlite3.connect(
                IN_MEMORY_PATH, timeout=timeout, check_same_thread=False
            )
        else:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> "SQLiteDatabase":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SQLiteDatabase({self.db_path!r})"

    def close(self) -> None:
        """Close the shared connection, if any. Safe to call twice."""
        if self._shared_conn is not None:
            self._shared_conn.close()
            self._shared_conn = None

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if self._shared_conn is not None:
            conn = self._shared_conn
        elif self.db_path == IN_MEMORY_PATH:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        else:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            if conn is not self._shared_conn:
                conn.close()

    def execute(self, statement: str) -> None:
        logger.debug(f"Executing statement on {self.db_path}: {statement}")
        with self._connect() as conn:
            conn.execute(statement)

    def upsert(self, table: str, row: dict[str, Any]) -> None:
        columns = ", ".join(quote_identifier(c) for c in row)
        placeholders = ", ".join("?" for _ in row)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {quote_identifier(table)} "
                f"({columns}) VALUES ({placeholders})",
                tuple(row.values()),
            )

    def delete(self, table: str, where: str, params: Sequence[Any]) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                f"DELETE FROM {quote_identifier(table)} WHERE {where}",
                tuple(params),
            )
            return cursor.rowcount

    def query(
        self,
        table: str,
        columns: Sequence[str],
        where: str | None = None,
        params: Sequence[Any] = (),
        order_by: str | None = None,
    ) -> list[tuple]:
        sql = (
            f"SELECT {', '.join(quote_identifier(c) for c in columns)} "
            f"FROM {quote_identifier(table)}"
        )
        if where:
            sql += f" WHERE {where}"
        if order_by:
            sql += f" ORDER BY {order_by}"

        with self._connect() as conn:
            return conn.execute(sql, tuple(params)).fetchall()

    def table_exists(self, table: str) -> bool:
        with self._connect() as conn:
            return table_exists(conn, table)

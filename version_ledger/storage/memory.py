"""
In-memory DatabaseProvider for tests.

Understands just enough SQL for the ledger: ``CREATE TABLE IF NOT EXISTS``
with column types, NOT NULL and a PRIMARY KEY clause, and WHERE clauses made
of ``column = ?`` terms joined by AND. Errors are raised as the same
``sqlite3.Error`` subclasses SQLite would raise, so code under test sees one
failure contract whichever provider it is given.
"""

import re
import sqlite3
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

_CREATE_TABLE_RE = re.compile(
    r"^\s*CREATE\s+TABLE\s+(?P<if_not_exists>IF\s+NOT\s+EXISTS\s+)?"
    r"(?P<name>\"?\w+\"?)\s*\((?P<body>.*)\)\s*;?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_PRIMARY_KEY_RE = re.compile(r"^PRIMARY\s+KEY\s*\((?P<columns>[^)]*)\)$", re.IGNORECASE)
_EQUALITY_TERM_RE = re.compile(r"^\"?(?P<column>\w+)\"?\s*=\s*\?$")


@dataclass
class _Table:
    columns: list[str]
    not_null: set[str]
    primary_key: tuple[str, ...]
    # primary key tuple (or insertion counter) -> row dict
    rows: dict[tuple, dict[str, Any]] = field(default_factory=dict)
    next_rowid: int = 0


def _split_top_level(body: str) -> list[str]:
    """Split a column list on commas that are not inside parentheses."""
    parts, depth, current = [], 0, []
    for char in body:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    if "".join(current).strip():
        parts.append("".join(current).strip())
    return parts


def _parse_where(where: str) -> list[str]:
    """Return the column names of an ``a = ? AND b = ?`` predicate."""
    columns = []
    for term in re.split(r"\s+AND\s+", where.strip(), flags=re.IGNORECASE):
        match = _EQUALITY_TERM_RE.match(term.strip())
        if match is None:
            raise sqlite3.OperationalError(f"unsupported WHERE clause: {where}")
        columns.append(match.group("column"))
    return columns


class InMemoryDatabase:
    """
    Dict-backed DatabaseProvider.

    All operations hold one lock, so concurrent ``CREATE TABLE IF NOT EXISTS``
    calls are idempotent and upserts on the same key serialize.

    Example:
        >>> db = InMemoryDatabase()
        >>> db.table_exists("ExoPlayerVersions")
        False
    """

    def __init__(self):
        self._tables: dict[str, _Table] = {}
        self._lock = threading.Lock()

    def _get_table(self, name: str) -> _Table:
        table = self._tables.get(name)
        if table is None:
            raise sqlite3.OperationalError(f"no such table: {name}")
        return table

    def _check_columns(self, table_name: str, table: _Table, columns) -> None:
        for column in columns:
            if column not in table.columns:
                raise sqlite3.OperationalError(
                    f"table {table_name} has no column named {column}"
                )

    def _matching_keys(self, table: _Table, where: str | None, params) -> list[tuple]:
        if not where:
            return list(table.rows)
        columns = _parse_where(where)
        if len(columns) != len(params):
            raise sqlite3.ProgrammingError(
                f"Incorrect number of bindings supplied. The current statement "
                f"uses {len(columns)}, and there are {len(params)} supplied."
            )
        return [
            key
            for key, row in table.rows.items()
            if all(row[c] == p for c, p in zip(columns, params, strict=True))
        ]

    def execute(self, statement: str) -> None:
        match = _CREATE_TABLE_RE.match(statement)
        if match is None:
            raise sqlite3.OperationalError(f"unsupported statement: {statement}")

        name = match.group("name").strip('"')
        with self._lock:
            if name in self._tables:
                if match.group("if_not_exists"):
                    return
                raise sqlite3.OperationalError(f"table {name} already exists")

            columns, not_null, primary_key = [], set(), ()
            for definition in _split_top_level(match.group("body")):
                pk_match = _PRIMARY_KEY_RE.match(definition)
                if pk_match:
                    primary_key = tuple(
                        c.strip().strip('"')
                        for c in pk_match.group("columns").split(",")
                    )
                    continue
                column = definition.split()[0].strip('"')
                columns.append(column)
                if re.search(r"\bNOT\s+NULL\b", definition, re.IGNORECASE):
                    not_null.add(column)

            self._tables[name] = _Table(columns, not_null, primary_key)

    def upsert(self, table: str, row: dict[str, Any]) -> None:
        with self._lock:
            target = self._get_table(table)
            self._check_columns(table, target, row)

            full_row = {column: row.get(column) for column in target.columns}
            for column in target.not_null:
                if full_row[column] is None:
                    raise sqlite3.IntegrityError(
                        f"NOT NULL constraint failed: {table}.{column}"
                    )

            if target.primary_key:
                key = tuple(full_row[c] for c in target.primary_key)
            else:
                key = (target.next_rowid,)
                target.next_rowid += 1
            target.rows[key] = full_row

    def delete(self, table: str, where: str, params: Sequence[Any]) -> int:
        with self._lock:
            target = self._get_table(table)
            keys = self._matching_keys(target, where, tuple(params))
            for key in keys:
                del target.rows[key]
            return len(keys)

    def query(
        self,
        table: str,
        columns: Sequence[str],
        where: str | None = None,
        params: Sequence[Any] = (),
        order_by: str | None = None,
    ) -> list[tuple]:
        with self._lock:
            target = self._get_table(table)
            self._check_columns(table, target, columns)
            rows = [
                target.rows[key]
                for key in self._matching_keys(target, where, tuple(params))
            ]

        if order_by:
            sort_columns = [c.strip().strip('"') for c in order_by.split(",")]
            self._check_columns(table, target, sort_columns)
            rows.sort(key=lambda r: tuple(r[c] for c in sort_columns))

        return [tuple(row[c] for c in columns) for row in rows]

    def table_exists(self, table: str) -> bool:
        with self._lock:
            return table in self._tables

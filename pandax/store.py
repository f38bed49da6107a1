"""A small relational store over SQLite that the services share."""

from __future__ import annotations

import contextlib
import dataclasses
import json
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Sequence

from pandax.common import BizError

_SQL_TYPES = {"int": "INTEGER", "bool": "INTEGER", "float": "REAL"}


def _quote(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _kind(f: dataclasses.Field) -> str:
    if f.metadata.get("time"):
        return "time"
    type_name = f.type if isinstance(f.type, str) else getattr(f.type, "__name__", str(f.type))
    if "datetime" in type_name:
        return "time"
    if type_name in ("bool", "int", "float", "str"):
        return type_name
    return "json"


def _stored_fields(model: Any) -> list[dataclasses.Field]:
    return [f for f in dataclasses.fields(model) if f.metadata.get("stored", True)]


def _column(f: dataclasses.Field) -> str:
    return f.metadata.get("column", f.name)


def _default(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return None


def _encode(f: dataclasses.Field, value: Any) -> Any:
    if value is None:
        return None
    kind = _kind(f)
    if kind == "time":
        return value.isoformat() if isinstance(value, datetime) else value
    if kind == "bool":
        return int(value)
    if kind == "json":
        return json.dumps(value)
    return value


def _decode(f: dataclasses.Field, value: Any) -> Any:
    if value is None:
        return _default(f)
    kind = _kind(f)
    if kind == "time":
        return value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if kind == "bool":
        return bool(value)
    if kind == "json":
        return json.loads(value)
    return value


@dataclass(frozen=True)
class Query:
    """Filter, order and paging conditions; every method returns a new query."""

    clauses: tuple[str, ...] = ()
    params: tuple[Any, ...] = ()
    orders: tuple[str, ...] = ()
    max_rows: int | None = None
    skip: int = 0

    def where(self, clause: str, *args: Any) -> "Query":
        """Add a condition; a list argument expands to one placeholder per item."""
        pieces = clause.split("?")
        if len(pieces) - 1 != len(args):
            raise BizError(f"condition {clause!r} expects {len(pieces) - 1} arguments")
        sql = pieces[0]
        params: list[Any] = []
        for arg, piece in zip(args, pieces[1:]):
            if isinstance(arg, (list, tuple, set, frozenset)):
                items = list(arg)
                sql += ", ".join("?" for _ in items) or "NULL"
                params.extend(items)
            else:
                sql += "?"
                params.append(arg)
            sql += piece
        return dataclasses.replace(
            self, clauses=self.clauses + (sql,), params=self.params + tuple(params)
        )

    def order_by(self, clause: str) -> "Query":
        return dataclasses.replace(self, orders=self.orders + (clause,))

    def limit(self, count: int | None, offset: int = 0) -> "Query":
        return dataclasses.replace(self, max_rows=count, skip=offset)


class Store:
    """Record storage in one SQLite database."""

    def __init__(self, path: str = ":memory:", db_type: str = "sqlite") -> None:
        self.path = str(path)
        self.db_type = db_type
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise BizError(str(exc)) from exc
        self._conn.row_factory = sqlite3.Row

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _run(self, sql: str, params: Sequence[Any] = ()) -> tuple[list[sqlite3.Row], int, int | None]:
        with self._lock:
            try:
                cursor = self._conn.execute(sql, tuple(params))
                rows = cursor.fetchall()
                self._conn.commit()
            except sqlite3.Error as exc:
                with contextlib.suppress(sqlite3.Error):
                    self._conn.rollback()
                raise BizError(str(exc)) from exc
            return rows, cursor.rowcount, cursor.lastrowid

    @staticmethod
    def _where(query: Query | None) -> tuple[str, list[Any]]:
        if query is None or not query.clauses:
            return "", []
        return " WHERE " + " AND ".join(f"({c})" for c in query.clauses), list(query.params)

    def create_table(self, table: str, model: type) -> None:
        """Create the table for a record class unless it already exists."""
        key = getattr(model, "KEY", "id")
        definitions = []
        for f in _stored_fields(model):
            column = _column(f)
            if column == key:
                definitions.append(f"{_quote(column)} INTEGER PRIMARY KEY AUTOINCREMENT")
            else:
                definitions.append(f"{_quote(column)} {_SQL_TYPES.get(_kind(f), 'TEXT')}")
        self._run(f"CREATE TABLE IF NOT EXISTS {_quote(table)} ({', '.join(definitions)})")

    def insert(self, table: str, record: Any) -> Any:
        """Insert a record and return a copy carrying its key and timestamps."""
        key = getattr(type(record), "KEY", "id")
        now = datetime.now()
        stamps = {
            name: now
            for name in ("create_time", "update_time")
            if hasattr(record, name) and getattr(record, name) is None
        }
        record = dataclasses.replace(record, **stamps)
        columns, values = [], []
        key_field = None
        for f in _stored_fields(record):
            column = _column(f)
            value = getattr(record, f.name)
            if column == key:
                key_field = f
                if not value:
                    continue
            columns.append(_quote(column))
            values.append(_encode(f, value))
        if columns:
            sql = (
                f"INSERT INTO {_quote(table)} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in values)})"
            )
        else:
            sql = f"INSERT INTO {_quote(table)} DEFAULT VALUES"
        _, _, row_id = self._run(sql, values)
        if key_field is not None and not getattr(record, key_field.name):
            record = dataclasses.replace(record, **{key_field.name: row_id})
        return record

    def first(self, table: str, model: type, query: Query | None = None) -> Any | None:
        """Return the first matching record, ordered by key unless told otherwise."""
        query = query or Query()
        if not query.orders:
            query = query.order_by(_quote(getattr(model, "KEY", "id")))
        rows = self.find(table, model, query.limit(1, query.skip))
        return rows[0] if rows else None

    def find(self, table: str, model: type, query: Query | None = None) -> list[Any]:
        where, params = self._where(query)
        sql = f"SELECT * FROM {_quote(table)}{where}"
        if query is not None:
            if query.orders:
                sql += " ORDER BY " + ", ".join(query.orders)
            if query.max_rows is not None or query.skip:
                sql += " LIMIT ? OFFSET ?"
                params += [-1 if query.max_rows is None else query.max_rows, query.skip]
        rows, _, _ = self._run(sql, params)
        fields = _stored_fields(model)
        result = []
        for row in rows:
            present = row.keys()
            result.append(model(**{
                f.name: _decode(f, row[_column(f)]) for f in fields if _column(f) in present
            }))
        return result

    def count(self, table: str, query: Query | None = None) -> int:
        where, params = self._where(query)
        rows, _, _ = self._run(f"SELECT COUNT(*) FROM {_quote(table)}{where}", params)
        return rows[0][0]

    def update(self, table: str, key: str, record: Any) -> int:
        """Write the non-empty fields of a record to the row with its key."""
        key_value = None
        assignments, params = [], []
        has_update_time = False
        for f in _stored_fields(record):
            column = _column(f)
            value = getattr(record, f.name)
            if column == key:
                key_value = value
                continue
            if f.name == "update_time":
                has_update_time = True
                continue
            if not value:
                continue
            assignments.append(f"{_quote(column)} = ?")
            params.append(_encode(f, value))
        if not key_value:
            raise BizError(f"update of {table} needs a value for {key}")
        if has_update_time:
            assignments.append(f"{_quote('update_time')} = ?")
            params.append(datetime.now().isoformat())
        if not assignments:
            return 0
        sql = f"UPDATE {_quote(table)} SET {', '.join(assignments)} WHERE {_quote(key)} = ?"
        _, changed, _ = self._run(sql, params + [key_value])
        return changed

    def set_column(self, table: str, column: str, value: Any, query: Query | None = None) -> int:
        where, params = self._where(query)
        sql = f"UPDATE {_quote(table)} SET {_quote(column)} = ?{where}"
        _, changed, _ = self._run(sql, [value] + params)
        return changed

    def delete(self, table: str, column: str, values: Iterable[Any]) -> int:
        values = list(values)
        if not values:
            return 0
        placeholders = ", ".join("?" for _ in values)
        sql = f"DELETE FROM {_quote(table)} WHERE {_quote(column)} IN ({placeholders})"
        _, changed, _ = self._run(sql, values)
        return changed

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        _, changed, _ = self._run(sql, params)
        return changed

    def tables(self) -> list[str]:
        rows, _, _ = self._run(
            "SELECT name FROM sqlite_master WHERE type = 'table' "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row[0] for row in rows]

    def columns(self, table: str) -> list[dict[str, Any]]:
        """Describe the columns of a table in information-schema terms."""
        rows, _, _ = self._run(f"PRAGMA table_info({_quote(table)})")
        result = []
        for row in rows:
            column_type = (row["type"] or "").lower()
            result.append({
                "table_schema": "main",
                "table_name": table,
                "column_name": row["name"],
                "column_default": "" if row["dflt_value"] is None else str(row["dflt_value"]),
                "is_nullable": "NO" if row["notnull"] or row["pk"] else "YES",
                "data_type": column_type,
                "character_maximum_length": "",
                "character_set_name": "",
                "column_type": column_type,
                "column_key": "PRI" if row["pk"] else "",
                "extra": "auto_increment" if row["pk"] and column_type == "integer" else "",
                "column_comment": "",
            })
        return result

    def close(self) -> None:
        with self._lock:
            self._conn.close()
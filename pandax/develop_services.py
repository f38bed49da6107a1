"""Services over imported tables and their column settings."""

from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from typing import Iterator

from pandax.common import BizError, page_offset
from pandax.develop_models import DBColumns, DBTables, DevGenTable, DevGenTableColumn
from pandax.store import Query, Store

_SUPPORTED_DB_TYPES = ("mysql", "postgresql", "sqlite")
_EXCLUDED_COLUMNS = ("", "id", "create_by", "update_by", "create_time", "update_time",
                     "delete_time")


@contextmanager
def _guard(message: str) -> Iterator[None]:
    try:
        yield
    except BizError as exc:
        raise BizError(message) from exc


def _check_db_type(store: Store) -> None:
    if store.db_type not in _SUPPORTED_DB_TYPES:
        raise BizError("only mysql and postgresql databases are supported")


def _is_dev_table(name: str) -> bool:
    # Mirrors the catalogue filter "table_name NOT LIKE 'dev_%'".
    return len(name) >= 4 and name[:3].lower() == "dev"


def _page(items: list, page: int, page_size: int) -> list:
    offset = page_offset(page, page_size)
    return items[offset:offset + page_size]


class GenTableColumnService:
    """Column settings of imported tables, and the database's own column catalogue."""

    TABLE = DevGenTableColumn.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, DevGenTableColumn)

    def find_db_table_columns_page(self, page: int, page_size: int,
                                   data: DBColumns | None = None) -> tuple[list[DBColumns], int]:
        _check_db_type(self.store)
        data = data or DBColumns()
        with _guard("failed to query the table columns"):
            names = [data.table_name] if data.table_name else self.store.tables()
            columns = [DBColumns(**row) for name in names for row in self.store.columns(name)]
        return _page(columns, page, page_size), len(columns)

    def find_db_table_column_list(self, table_name: str) -> list[DBColumns]:
        _check_db_type(self.store)
        if not table_name:
            raise BizError("table name cannot be empty!")
        with _guard("failed to query the table columns"):
            return [DBColumns(**row) for row in self.store.columns(table_name)]

    def insert(self, data: DevGenTableColumn) -> DevGenTableColumn:
        with _guard("failed to add the generated column"):
            return self.store.insert(self.TABLE, data)

    def find_list(self, data: DevGenTableColumn, exclude: bool = False) -> list[DevGenTableColumn]:
        query = Query().where("table_id = ?", data.table_id)
        if exclude:
            query = query.where("column_name not in (?)", list(_EXCLUDED_COLUMNS))
        with _guard("failed to query the generated columns"):
            return self.store.find(self.TABLE, DevGenTableColumn, query.order_by("column_id"))

    def update(self, data: DevGenTableColumn) -> DevGenTableColumn:
        with _guard("failed to update the generated column"):
            self.store.update(self.TABLE, "column_id", data)
        return data

    def delete(self, table_ids: list[int]) -> None:
        with _guard("failed to delete the generated columns"):
            self.store.delete(self.TABLE, "table_id", table_ids)


def _table_filters(data: DevGenTable, with_id: bool = True) -> Query:
    query = Query()
    if data.table_name:
        query = query.where("table_name = ?", data.table_name)
    if with_id and data.table_id:
        query = query.where("table_id = ?", data.table_id)
    if data.table_comment:
        query = query.where("table_comment = ?", data.table_comment)
    return query


class GenTableService:
    """Imported tables and their generation settings."""

    TABLE = DevGenTable.TABLE

    def __init__(self, store: Store, columns: GenTableColumnService | None = None) -> None:
        self.store = store
        self.columns = columns or GenTableColumnService(store)
        store.create_table(self.TABLE, DevGenTable)

    def find_db_tables_page(self, page: int, page_size: int,
                            data: DBTables | None = None) -> tuple[list[DBTables], int]:
        """Page through the database's own tables, leaving out the generator's tables."""
        _check_db_type(self.store)
        data = data or DBTables()
        with _guard("failed to query the database table page"):
            names = [name for name in self.store.tables() if not _is_dev_table(name)]
        if data.table_name:
            needle = data.table_name.lower()
            names = [name for name in names if needle in name.lower()]
        return [DBTables(table_name=name) for name in _page(names, page, page_size)], len(names)

    def find_db_table_one(self, table_name: str) -> DBTables:
        _check_db_type(self.store)
        with _guard("failed to query the database table"):
            names = self.store.tables()
        if table_name not in names:
            raise BizError(f"table {table_name!r} not found", 404)
        return DBTables(table_name=table_name)

    def insert(self, data: DevGenTable) -> DevGenTable:
        """Store a table and each of its columns under the new table id."""
        with _guard("failed to add the generated table"):
            table = self.store.insert(self.TABLE, data)
        columns = [
            self.columns.insert(dataclasses.replace(column, table_id=table.table_id))
            for column in data.columns
        ]
        return dataclasses.replace(table, columns=columns)

    def find_one(self, data: DevGenTable, exclude: bool = False) -> DevGenTable:
        with _guard("failed to query the table configuration"):
            found = self.store.first(self.TABLE, DevGenTable, _table_filters(data))
        if found is None:
            raise BizError("failed to query the table configuration", 404)
        columns = self.columns.find_list(DevGenTableColumn(table_id=found.table_id), exclude)
        return dataclasses.replace(found, columns=columns)

    def find_tree(self, data: DevGenTable | None = None) -> list[DevGenTable]:
        query = _table_filters(data or DevGenTable()).order_by("table_id")
        with _guard("failed to query the table tree"):
            tables = self.store.find(self.TABLE, DevGenTable, query)
        return [
            dataclasses.replace(
                table,
                columns=self.columns.find_list(DevGenTableColumn(table_id=table.table_id), False),
            )
            for table in tables
        ]

    def find_list_page(self, page: int, page_size: int,
                       data: DevGenTable | None = None) -> tuple[list[DevGenTable], int]:
        query = _table_filters(data or DevGenTable(), with_id=False).where("delete_time IS NULL")
        with _guard("failed to query the generated table page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, DevGenTable,
                query.order_by("table_id").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def update(self, data: DevGenTable) -> DevGenTable:
        """Save a table and its columns, filling in details of linked tables."""
        with _guard("failed to update the generated table"):
            self.store.update(self.TABLE, "table_id", data)

        link_names = [c.link_table_name for c in data.columns if c.link_table_name]
        linked: dict[str, DevGenTable] = {}
        if link_names:
            with _guard("linked table does not exist"):
                found = self.store.find(
                    self.TABLE, DevGenTable, Query().where("table_name in (?)", link_names)
                )
            linked = {table.table_name: table for table in found}

        columns = []
        for column in data.columns:
            target = linked.get(column.link_table_name) if column.link_table_name else None
            if target is not None:
                column = dataclasses.replace(
                    column,
                    link_table_class=target.class_name,
                    link_table_package=target.business_name,
                    link_label_id=target.pk_column,
                    link_label_name=target.pk_go_field,
                )
            columns.append(self.columns.update(column))
        return dataclasses.replace(data, columns=columns)

    def delete(self, table_ids: list[int]) -> None:
        with _guard("failed to delete the generated tables"):
            self.store.delete(self.TABLE, "table_id", table_ids)
        self.columns.delete(table_ids)
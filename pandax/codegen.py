"""Derive code-generation settings for a table from its database columns."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

from pandax.develop_models import DBColumns, DevGenTable, DevGenTableColumn

_PARENTHESISED = re.compile(r"\(.+\)")
_INTEGER = re.compile(r"[+-]?\d+")

_FLOAT_TYPES = frozenset({"float", "float4", "float8", "double", "decimal"})
_INT_TYPES = frozenset({
    "bit", "int", "int2", "int4", "tinyint", "small_int", "smallint", "medium_int", "mediumint",
})
_BIG_INT_TYPES = frozenset({"big_int", "int8", "bigint", "numeric"})


def _upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def _lower_first(word: str) -> str:
    return word[:1].lower() + word[1:]


@dataclass
class ColumnTools:
    """Rules that map database column types and names to generation settings."""

    column_type_str: tuple[str, ...] = (
        "char", "varchar", "narchar", "varchar2", "tinytext", "text", "mediumtext", "longtext",
    )
    column_type_time: tuple[str, ...] = ("datetime", "time", "date", "timestamp", "timestamptz")
    column_type_number: tuple[str, ...] = (
        "tinyint", "smallint", "mediumint", "int", "int2", "int4", "int8", "number", "integer",
        "numeric", "bigint", "float", "float4", "float8", "double", "decimal",
    )
    column_name_not_edit: tuple[str, ...] = (
        "create_by", "update_by", "create_time", "update_time", "delete_time",
    )
    column_name_not_list: tuple[str, ...] = ("create_by", "update_by", "update_time", "delete_time")
    column_name_not_query: tuple[str, ...] = field(default=(
        "create_by", "update_by", "create_time", "update_time", "delete_time", "remark",
    ))

    def get_db_type(self, column_type: str) -> str:
        """The type name without its size, e.g. ``varchar`` for ``varchar(64)``."""
        index = column_type.find("(")
        return column_type[:index] if index > 0 else column_type

    def get_column_length(self, column_type: str) -> int:
        """The declared size of a column type, read the way the generator reads it."""
        start = column_type.find("(")
        end = column_type.find(")")
        text = column_type[start + 1:end - 1] if start >= 0 and end >= 0 else ""
        return int(text) if _INTEGER.fullmatch(text) else 0

    def is_string_object(self, data_type: str) -> bool:
        return data_type in self.column_type_str

    def is_time_object(self, data_type: str) -> bool:
        return data_type in self.column_type_time

    def is_number_object(self, data_type: str) -> bool:
        return data_type in self.column_type_number

    def is_not_edit(self, name: str) -> bool:
        return "id" in name or name in self.column_name_not_edit

    def is_not_list(self, name: str) -> bool:
        return name in self.column_name_not_list

    def is_not_query(self, name: str) -> bool:
        return name in self.column_name_not_query

    def check_name_column(self, column_name: str) -> bool:
        return column_name.endswith("name")

    def check_status_column(self, column_name: str) -> bool:
        return column_name.endswith("status")

    def check_type_column(self, column_name: str) -> bool:
        return column_name.endswith("type")

    def check_sex_column(self, column_name: str) -> bool:
        return column_name.endswith("sex")

    def _number_go_type(self, column_type: str, db_type: str) -> str:
        if db_type == "postgresql":
            base = column_type
        else:
            stripped = _PARENTHESISED.sub("", column_type).strip()
            base = stripped.split(" ")[0].lower()
        unsigned = "unsigned" in column_type
        if base in _FLOAT_TYPES:
            return "float64"
        if base in _INT_TYPES:
            return "uint" if unsigned else "int"
        if base in _BIG_INT_TYPES:
            return "uint64" if unsigned else "int64"
        return ""

    def init_column(self, db_column: DBColumns, sort: int,
                    db_type: str = "mysql") -> DevGenTableColumn:
        """Default generation settings for one catalogue column."""
        column = DevGenTableColumn(
            column_comment=db_column.column_comment,
            column_name=db_column.column_name,
            column_type=db_column.column_type,
            sort=sort,
            is_pk="0",
        )
        parts = db_column.column_name.split("_")
        column.go_field = "".join(_upper_first(part) for part in parts)
        column.json_field = _lower_first(parts[0]) + "".join(_upper_first(p) for p in parts[1:])

        if "PR" in db_column.column_key:
            column.is_pk = "1"
            if db_column.extra == "auto_increment":
                column.is_increment = "1"

        if not column.column_comment:
            column.column_comment = column.go_field

        data_type = self.get_db_type(column.column_type)
        if self.is_string_object(data_type):
            column.go_type = "string"
            long_text = self.get_column_length(column.column_type) >= 500
            column.html_type = "textarea" if long_text else "input"
        elif self.is_time_object(data_type):
            column.go_type = "Time"
            column.html_type = "datetime"
        elif self.is_number_object(data_type):
            column.html_type = "input"
            column.go_type = self._number_go_type(column.column_type, db_type)
        elif data_type == "bool":
            column.go_type = "bool"
            column.html_type = "switch"

        name = column.column_name
        not_edit = self.is_not_edit(name)
        column.is_required = "0"
        if not_edit:
            column.is_insert = "0"
        else:
            column.is_insert = "1"
            if "name" in name or "status" in name:
                column.is_required = "1"

        column.is_edit = "0" if not_edit or column.is_pk == "1" else "1"
        column.is_list = "0" if self.is_not_list(name) else "1"
        column.is_query = "0" if self.is_not_query(name) else "1"
        column.query_type = "LIKE" if self.check_name_column(name) else "EQ"

        if self.check_status_column(name):
            column.html_type = "radio"
        elif self.check_type_column(name) or self.check_sex_column(name):
            column.html_type = "select"
        return column

    def gen_table_init(self, table_name: str, db_columns: Iterable[DBColumns],
                       db_type: str = "mysql") -> DevGenTable:
        """Default generation settings for a table and all of its columns."""
        parts = table_name.split("_")
        table = DevGenTable(
            table_name=table_name,
            class_name="".join(_upper_first(part) for part in parts),
            business_name="".join(_lower_first(part) for part in parts[1:]),
            function_name=_upper_first(parts[-1]) if len(parts) > 1 else "",
            package_name="system",
            tpl_category="crud",
            module_name=table_name.replace("_", "-"),
            function_author="panda",
        )
        table.table_comment = table.class_name

        for sort, db_column in enumerate(db_columns, start=1):
            column = self.init_column(db_column, sort, db_type)
            if column.is_pk == "1":
                table.pk_column = column.column_name
                table.pk_go_field = column.go_field
                table.pk_json_field = column.json_field
            table.columns.append(column)
        return table
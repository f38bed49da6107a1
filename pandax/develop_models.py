"""Records describing tables and columns that code is generated from."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, ClassVar

from pandax.models import Record


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _field(default: Any = "", *, stored: bool = True) -> Any:
    return dataclasses.field(default=default, metadata={"stored": stored})


def _plain_to_dict(obj: Any) -> dict[str, Any]:
    return {_camel(f.name): getattr(obj, f.name) for f in dataclasses.fields(obj)}


def _plain_from_dict(cls: type, data: dict[str, Any]) -> Any:
    values = {}
    for f in dataclasses.fields(cls):
        for name in (_camel(f.name), f.name):
            if name in data:
                values[f.name] = data[name]
                break
    return cls(**values)


@dataclass
class DevGenTableColumn:
    """Generation settings of one column of an imported table."""

    TABLE: ClassVar[str] = "dev_gen_table_columns"
    KEY: ClassVar[str] = "column_id"

    column_id: int = _field(0)
    table_id: int = _field(0)
    table_name: str = _field()
    column_name: str = _field()
    column_comment: str = _field()
    column_type: str = _field()
    column_key: str = _field()
    go_type: str = _field()
    go_field: str = _field()
    json_field: str = _field()
    html_field: str = _field()
    is_pk: str = _field()
    is_increment: str = _field()
    is_required: str = _field()
    is_insert: str = _field()
    is_edit: str = _field()
    is_list: str = _field()
    is_query: str = _field()
    query_type: str = _field()
    html_type: str = _field()
    dict_type: str = _field()
    sort: int = _field(0)
    link_table_name: str = _field()
    link_table_class: str = _field()
    link_table_package: str = _field()
    link_label_id: str = _field()
    link_label_name: str = _field()

    def to_dict(self) -> dict[str, Any]:
        return _plain_to_dict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DevGenTableColumn":
        return _plain_from_dict(cls, data)


@dataclass
class DevGenTable(Record):
    """An imported table together with its generation settings."""

    TABLE: ClassVar[str] = "dev_gen_tables"
    KEY: ClassVar[str] = "table_id"

    table_id: int = _field(0)
    table_name: str = _field()
    table_comment: str = _field()
    class_name: str = _field()
    tpl_category: str = _field()
    package_name: str = _field()
    module_name: str = _field()
    business_name: str = _field()
    function_name: str = _field()
    function_author: str = _field()
    options: str = _field()
    remark: str = _field()
    pk_column: str = _field()
    pk_go_field: str = _field()
    pk_json_field: str = _field()
    columns: list[DevGenTableColumn] = dataclasses.field(
        default_factory=list, metadata={"stored": False}
    )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["columns"] = [column.to_dict() for column in self.columns]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DevGenTable":
        rest = {key: value for key, value in data.items() if key != "columns"}
        table = super().from_dict(rest)
        table.columns = [
            item if isinstance(item, DevGenTableColumn) else DevGenTableColumn.from_dict(item)
            for item in data.get("columns") or []
        ]
        return table


@dataclass
class DBTables:
    """A table as the database catalogue describes it."""

    table_name: str = ""
    engine: str = ""
    table_rows: str = ""
    table_collation: str = ""
    create_time: str = ""
    update_time: str = ""
    table_comment: str = ""


@dataclass
class DBColumns:
    """A column as the database catalogue describes it."""

    table_schema: str = ""
    table_name: str = ""
    column_name: str = ""
    column_default: str = ""
    is_nullable: str = ""
    data_type: str = ""
    character_maximum_length: str = ""
    character_set_name: str = ""
    column_type: str = ""
    column_key: str = ""
    extra: str = ""
    column_comment: str = ""


@dataclass
class TableInfoVo:
    """A table's settings together with its column list."""

    list: list[DevGenTableColumn] = dataclasses.field(default_factory=list)
    info: DevGenTable = dataclasses.field(default_factory=DevGenTable)

    def to_dict(self) -> dict[str, Any]:
        return {
            "list": [column.to_dict() for column in self.list],
            "info": self.info.to_dict(),
        }
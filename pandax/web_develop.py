"""HTTP routes for importing tables and editing their code-generation settings."""

from __future__ import annotations

import dataclasses
from typing import Any

from flask import Blueprint, jsonify, request

from pandax.codegen import ColumnTools
from pandax.common import BizError, parse_ids
from pandax.develop_models import DBTables, DevGenTable, TableInfoVo
from pandax.develop_services import GenTableService


def _ok(data: Any = None):
    return jsonify({"code": 200, "msg": "success", "data": data})


def _biz_error(exc: BizError):
    status = exc.code if 400 <= exc.code < 600 else 400
    return jsonify({"code": exc.code, "msg": exc.message}), status


def _payload() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        return request.args.to_dict()
    if not isinstance(body, dict):
        raise BizError("request body must be a JSON object")
    return body


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _as_dict(item: Any) -> Any:
    if hasattr(item, "to_dict"):
        return item.to_dict()
    if dataclasses.is_dataclass(item):
        return {_camel(f.name): getattr(item, f.name) for f in dataclasses.fields(item)}
    return item


def _page(total: int, page_num: int, page_size: int, rows: list) -> dict[str, Any]:
    return {
        "total": total,
        "pageNum": page_num,
        "pageSize": page_size,
        "data": [_as_dict(row) for row in rows],
    }


def _table_info(table: DevGenTable) -> dict[str, Any]:
    return TableInfoVo(list=list(table.columns), info=table).to_dict()


def create_develop_blueprint(table_service: GenTableService,
                             tools: ColumnTools | None = None) -> Blueprint:
    """Routes under ``/develop/code/table``."""
    tools = tools or ColumnTools()
    bp = Blueprint("develop_table", __name__, url_prefix="/develop/code/table")
    bp.register_error_handler(BizError, _biz_error)

    @bp.get("/db/list")
    def db_table_list():
        page_num = request.args.get("pageNum", 1, type=int)
        page_size = request.args.get("pageSize", 10, type=int)
        data = DBTables(table_name=request.args.get("tableName", ""))
        rows, total = table_service.find_db_tables_page(page_num, page_size, data)
        return _ok(_page(total, page_num, page_size, rows))

    @bp.get("/list")
    def table_list():
        page_num = request.args.get("pageNum", 1, type=int)
        page_size = request.args.get("pageSize", 10, type=int)
        data = DevGenTable(
            table_name=request.args.get("tableName", ""),
            table_comment=request.args.get("tableComment", ""),
        )
        rows, total = table_service.find_list_page(page_num, page_size, data)
        return _ok(_page(total, page_num, page_size, rows))

    @bp.get("/info/tableName")
    def table_info_by_name():
        name = request.args.get("tableName", "")
        return _ok(_table_info(table_service.find_one(DevGenTable(table_name=name), True)))

    @bp.get("/info/<int:table_id>")
    def table_info(table_id: int):
        return _ok(_table_info(table_service.find_one(DevGenTable(table_id=table_id), True)))

    @bp.get("/tableTree")
    def table_tree():
        return _ok([table.to_dict() for table in table_service.find_tree(DevGenTable())])

    @bp.post("")
    def table_insert():
        names = request.args.get("tables", "").split(",")
        db_type = table_service.store.db_type
        inserted = []
        for name in names:
            db_columns = table_service.columns.find_db_table_column_list(name)
            table = tools.gen_table_init(name, db_columns, db_type)
            inserted.append(table_service.insert(table).to_dict())
        return _ok(inserted)

    @bp.put("")
    def table_update():
        return _ok(table_service.update(DevGenTable.from_dict(_payload())).to_dict())

    @bp.delete("/<table_ids>")
    def table_delete(table_ids: str):
        table_service.delete(parse_ids(table_ids))
        return _ok()

    return bp
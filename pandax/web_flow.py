"""HTTP routes for workflow classifications."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from pandax.common import BizError, ResultPage, parse_ids
from pandax.flow_services import FlowWorkClassifyService
from pandax.models import FlowWorkClassify


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


def create_flow_blueprint(service: FlowWorkClassifyService) -> Blueprint:
    """Routes under ``/flow/workclassify``."""
    bp = Blueprint("flow_workclassify", __name__, url_prefix="/flow/workclassify")
    bp.register_error_handler(BizError, _biz_error)

    @bp.get("/list")
    def classify_list():
        page_num = request.args.get("pageNum", 1, type=int)
        page_size = request.args.get("pageSize", 10, type=int)
        data = FlowWorkClassify(name=request.args.get("name", ""))
        rows, total = service.find_list_page(page_num, page_size, data)
        return _ok(ResultPage(total, page_num, page_size, rows).to_dict())

    @bp.get("/<int:classify_id>")
    def classify_get(classify_id: int):
        return _ok(service.find_one(classify_id).to_dict())

    @bp.post("")
    def classify_create():
        return _ok(service.insert(FlowWorkClassify.from_dict(_payload())).to_dict())

    @bp.put("")
    def classify_update():
        return _ok(service.update(FlowWorkClassify.from_dict(_payload())).to_dict())

    @bp.delete("/<ids>")
    def classify_delete(ids: str):
        service.delete(parse_ids(ids))
        return _ok()

    return bp
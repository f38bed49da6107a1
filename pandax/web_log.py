"""HTTP routes for the job, login and operation logs."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from pandax.common import BizError, parse_ids
from pandax.log_services import LogJobService, LogLoginService, LogOperService
from pandax.models import LogJob, LogLogin, LogOper


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


def _paging() -> tuple[int, int]:
    return (request.args.get("pageNum", 1, type=int),
            request.args.get("pageSize", 10, type=int))


def _page(total: int, page_num: int, page_size: int, rows: list) -> dict[str, Any]:
    return {
        "total": total,
        "pageNum": page_num,
        "pageSize": page_size,
        "data": [row.to_dict() for row in rows],
    }


def create_log_blueprint(job_logs: LogJobService, login_logs: LogLoginService,
                         oper_logs: LogOperService) -> Blueprint:
    """Routes under ``/log/logJob``, ``/log/logLogin`` and ``/log/logOper``."""
    bp = Blueprint("log", __name__, url_prefix="/log")
    bp.register_error_handler(BizError, _biz_error)

    @bp.get("/logJob/list")
    def job_log_list():
        page_num, page_size = _paging()
        data = LogJob(
            name=request.args.get("name", ""),
            job_group=request.args.get("jobGroup", ""),
            status=request.args.get("status", ""),
        )
        rows, total = job_logs.find_list_page(page_num, page_size, data)
        return _ok(_page(total, page_num, page_size, rows))

    @bp.delete("/logJob/all")
    def job_log_delete_all():
        job_logs.delete_all()
        return _ok()

    @bp.delete("/logJob/<log_ids>")
    def job_log_delete(log_ids: str):
        job_logs.delete(parse_ids(log_ids))
        return _ok()

    @bp.get("/logLogin/list")
    def login_log_list():
        page_num, page_size = _paging()
        data = LogLogin(
            login_location=request.args.get("loginLocation", ""),
            username=request.args.get("username", ""),
        )
        rows, total = login_logs.find_list_page(page_num, page_size, data)
        return _ok(_page(total, page_num, page_size, rows))

    @bp.get("/logLogin/<int:info_id>")
    def login_log_get(info_id: int):
        return _ok(login_logs.find_one(info_id).to_dict())

    @bp.put("/logLogin")
    def login_log_update():
        return _ok(login_logs.update(LogLogin.from_dict(_payload())).to_dict())

    @bp.delete("/logLogin/all")
    def login_log_delete_all():
        login_logs.delete_all()
        return _ok()

    @bp.delete("/logLogin/<info_ids>")
    def login_log_delete(info_ids: str):
        login_logs.delete(parse_ids(info_ids))
        return _ok()

    @bp.get("/logOper/list")
    def oper_log_list():
        page_num, page_size = _paging()
        data = LogOper(
            business_type=request.args.get("businessType", ""),
            oper_name=request.args.get("operName", ""),
            title=request.args.get("title", ""),
        )
        rows, total = oper_logs.find_list_page(page_num, page_size, data)
        return _ok(_page(total, page_num, page_size, rows))

    @bp.get("/logOper/<int:oper_id>")
    def oper_log_get(oper_id: int):
        return _ok(oper_logs.find_one(oper_id).to_dict())

    @bp.delete("/logOper/all")
    def oper_log_delete_all():
        oper_logs.delete_all()
        return _ok()

    @bp.delete("/logOper/<oper_ids>")
    def oper_log_delete(oper_ids: str):
        oper_logs.delete(parse_ids(oper_ids))
        return _ok()

    return bp
"""HTTP routes for managing scheduled jobs."""

from __future__ import annotations

import dataclasses
from typing import Any

from flask import Blueprint, g, jsonify, request

from pandax.common import BizError, JobStatus, ResultPage, parse_ids
from pandax.job_services import JobService
from pandax.jobs import ExecJob, HttpJob, JobRunner
from pandax.models import SysJob


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


def _int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BizError(f"invalid {name}: {value!r}") from None


def create_job_blueprint(service: JobService, runner: JobRunner) -> Blueprint:
    """Routes under ``/job``."""
    bp = Blueprint("job", __name__, url_prefix="/job")
    bp.register_error_handler(BizError, _biz_error)

    @bp.get("/list")
    def job_list():
        page_num = request.args.get("pageNum", 1, type=int)
        page_size = request.args.get("pageSize", 10, type=int)
        data = SysJob(
            job_name=request.args.get("jobName", ""),
            job_group=request.args.get("jobGroup", ""),
            status=request.args.get("status", ""),
        )
        rows, total = service.find_list_page(page_num, page_size, data)
        return _ok(ResultPage(total, page_num, page_size, rows).to_dict())

    @bp.get("/<int:job_id>")
    def job_get(job_id: int):
        return _ok(service.find_one(job_id).to_dict())

    @bp.post("")
    def job_create():
        job = SysJob.from_dict(_payload())
        job = dataclasses.replace(job, create_by=getattr(g, "user_name", ""))
        return _ok(service.insert(job).to_dict())

    @bp.put("")
    def job_update():
        return _ok(service.update(SysJob.from_dict(_payload())).to_dict())

    @bp.delete("/<job_ids>")
    def job_delete(job_ids: str):
        service.delete(parse_ids(job_ids))
        return _ok()

    @bp.get("/stop/<int:job_id>")
    def job_stop(job_id: int):
        job = service.find_one(job_id)
        runner.remove(job.entry_id)
        return _ok()

    @bp.get("/start/<int:job_id>")
    def job_start(job_id: int):
        job = service.find_one(job_id)
        if job.status != "0":
            raise BizError("a disabled job cannot be started")
        if job.entry_id != 0:
            raise BizError("the job is already running")
        core = dict(
            invoke_target=job.invoke_target,
            cron_expression=job.cron_expression,
            job_id=job.job_id,
            name=job.job_name,
            job_group=job.job_group,
            misfire_policy=job.misfire_policy,
        )
        runtime = HttpJob(**core) if job.job_type == "1" else ExecJob(args=job.args, **core)
        entry_id = runner.add(runtime)
        service.update(dataclasses.replace(job, entry_id=entry_id))
        return _ok({"entryId": entry_id})

    @bp.get("/changeStatus")
    def job_change_status():
        payload = _payload()
        form = JobStatus(
            job_id=_int(payload.get("jobId", 0), "jobId"),
            status=str(payload.get("status", "")),
        )
        service.update(SysJob(job_id=form.job_id, status=form.status))
        return _ok()

    return bp
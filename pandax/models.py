"""Stored records for logs, scheduled jobs, resources and workflow."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar

from pandax.common import BizError


def _camel(name: str) -> str:
    head, *rest = name.rstrip("_").split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _f(default: Any = None, *, json: str | None = None, column: str | None = None,
       time: bool = False, stored: bool = True) -> Any:
    metadata: dict[str, Any] = {"time": time, "stored": stored}
    if json is not None:
        metadata["json"] = json
    if column is not None:
        metadata["column"] = column
    return dataclasses.field(default=default, metadata=metadata)


def _json_name(f: dataclasses.Field) -> str:
    return f.metadata.get("json", _camel(f.name))


def _parse_time(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise BizError(f"invalid time value: {value!r}") from None
    raise BizError(f"invalid time value: {value!r}")


@dataclass
class Record:
    """Base of every stored record, carrying the audit timestamps."""

    TABLE: ClassVar[str] = ""
    KEY: ClassVar[str] = "id"

    create_time: datetime | None = _f(time=True)
    update_time: datetime | None = _f(time=True)
    delete_time: datetime | None = _f(time=True)

    def to_dict(self) -> dict[str, Any]:
        result = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[_json_name(f)] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        values = {}
        for f in dataclasses.fields(cls):
            if _json_name(f) in data:
                value = data[_json_name(f)]
            elif f.name in data:
                value = data[f.name]
            else:
                continue
            values[f.name] = _parse_time(value) if f.metadata.get("time") else value
        return cls(**values)


@dataclass
class _AutoRecord(Record):
    id: int = _f(0)


@dataclass
class LogJob(Record):
    TABLE: ClassVar[str] = "log_jobs"
    KEY: ClassVar[str] = "log_id"

    log_id: int = _f(0)
    name: str = _f("")
    job_group: str = _f("")
    entry_id: int = _f(0)
    invoke_target: str = _f("")
    log_info: str = _f("")
    status: str = _f("")


@dataclass
class LogLogin(Record):
    TABLE: ClassVar[str] = "log_logins"
    KEY: ClassVar[str] = "info_id"

    info_id: int = _f(0)
    username: str = _f("")
    status: str = _f("")
    ipaddr: str = _f("")
    login_location: str = _f("")
    browser: str = _f("")
    os: str = _f("")
    platform: str = _f("")
    login_time: datetime | None = _f(time=True)
    create_by: str = _f("")
    update_by: str = _f("")
    params: str = _f("", stored=False)
    remark: str = _f("")
    msg: str = _f("")


@dataclass
class LogOper(Record):
    TABLE: ClassVar[str] = "log_opers"
    KEY: ClassVar[str] = "oper_id"

    oper_id: int = _f(0)
    title: str = _f("")
    business_type: str = _f("")
    method: str = _f("")
    oper_name: str = _f("")
    oper_url: str = _f("")
    oper_ip: str = _f("")
    oper_location: str = _f("")
    oper_param: str = _f("")
    status: str = _f("")


@dataclass
class SysJob(Record):
    TABLE: ClassVar[str] = "sys_jobs"
    KEY: ClassVar[str] = "job_id"

    job_id: int = _f(0)
    job_name: str = _f("")
    job_group: str = _f("")
    job_type: str = _f("")
    cron_expression: str = _f("")
    invoke_target: str = _f("")
    args: str = _f("")
    misfire_policy: str = _f("")
    concurrent: str = _f("")
    status: str = _f("")
    entry_id: int = _f(0)
    create_by: str = _f("")
    update_by: str = _f("")


@dataclass
class ResEmail(Record):
    TABLE: ClassVar[str] = "res_emails"
    KEY: ClassVar[str] = "mail_id"

    mail_id: int = _f(0)
    category: str = _f("")
    host: str = _f("")
    port: int = _f(0)
    from_: str = _f("", json="from", column="from")
    nickname: str = _f("")
    secret: str = _f("")
    is_ssl: bool = _f(False, json="isSsl")
    status: str = _f("")


@dataclass
class ResOss(Record):
    TABLE: ClassVar[str] = "res_osses"
    KEY: ClassVar[str] = "oss_id"

    oss_id: int = _f(0)
    category: str = _f("")
    app_id: str = _f("")
    access_key: str = _f("")
    secret_key: str = _f("")
    bucket_name: str = _f("")
    endpoint: str = _f("")
    oss_code: str = _f("")
    region: str = _f("")
    remark: str = _f("")
    status: str = _f("")


@dataclass
class FlowWorkClassify(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_classify"

    name: str = _f("")
    creator: int = _f(0)


@dataclass
class FlowWorkInfo(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_info"

    name: str = _f("")
    icon: str = _f("")
    structure: Any = _f(None)
    classify: int = _f(0)
    templates: Any = _f(None)
    task: Any = _f(None)
    submit_count: int = _f(0)
    creator: int = _f(0)
    notice: Any = _f(None)
    remarks: str = _f("")


@dataclass
class FlowWorkOrder(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_order"

    title: str = _f("")
    priority: int = _f(0)
    process: int = _f(0)
    classify: int = _f(0)
    is_end: int = _f(0, json="is_end")
    is_denied: int = _f(0, json="is_denied")
    state: Any = _f(None)
    related_person: Any = _f(None, json="related_person")
    creator: int = _f(0)
    urge_count: int = _f(0, json="urge_count")
    urge_last_time: int = _f(0, json="urge_last_time")


@dataclass
class FlowWorkOrderTemplate(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_order_templates"

    work_order: int = _f(0, json="work_order")
    form_structure: Any = _f(None, json="form_structure")
    form_data: Any = _f(None, json="form_data")


@dataclass
class FlowWorkStage(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_stage"

    title: str = _f("")
    work_order: int = _f(0, json="work_order")
    state: str = _f("")
    source: str = _f("")
    target: str = _f("")
    stage: str = _f("")
    status: int = _f(0)
    processor: str = _f("")
    processor_id: int = _f(0, json="processor_id")
    cost_duration: int = _f(0, json="cost_duration")
    remarks: str = _f("")


@dataclass
class FlowWorkTask(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_task"

    name: str = _f("")
    task_type: str = _f("", json="task_type")
    content: str = _f("")
    creator: int = _f(0)
    remarks: str = _f("")


@dataclass
class FlowWorkTaskHistory(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_task_history"

    task: int = _f(0)
    name: str = _f("")
    task_type: int = _f(0, json="task_type")
    execution_time: str = _f("", json="execution_time")
    result: str = _f("")


@dataclass
class FlowWorkTemplates(_AutoRecord):
    TABLE: ClassVar[str] = "flow_work_templates"

    name: str = _f("")
    form_structure: Any = _f(None, json="form_structure")
    creator: int = _f(0)
    remarks: str = _f("")
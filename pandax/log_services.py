"""Services over the job, login and operation logs."""

from __future__ import annotations

import dataclasses
import logging
from contextlib import contextmanager
from typing import Iterator

from pandax.common import BizError, page_offset
from pandax.models import LogJob, LogLogin, LogOper
from pandax.store import Query, Store

logger = logging.getLogger(__name__)


@contextmanager
def _guard(message: str) -> Iterator[None]:
    try:
        yield
    except BizError as exc:
        raise BizError(message) from exc


class LogJobService:
    """Execution log of scheduled jobs."""

    TABLE = LogJob.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, LogJob)

    def insert(self, data: LogJob) -> LogJob:
        try:
            return self.store.insert(self.TABLE, data)
        except BizError as exc:
            logger.warning("could not write job log: %s", exc)
            return data

    def find_list_page(self, page: int, page_size: int,
                       data: LogJob | None = None) -> tuple[list[LogJob], int]:
        data = data or LogJob()
        query = Query()
        if data.status:
            query = query.where("status = ?", data.status)
        if data.job_group:
            query = query.where("job_group = ?", data.job_group)
        if data.name:
            query = query.where("name like ?", f"%{data.name}%")
        query = query.where("delete_time IS NULL")
        with _guard("failed to query the job log page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, LogJob,
                query.order_by("log_id desc").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def delete(self, log_ids: list[int]) -> None:
        with _guard("failed to delete job logs"):
            self.store.delete(self.TABLE, "log_id", log_ids)

    def delete_all(self) -> None:
        self.store.execute("DELETE FROM log_jobs")


class LogLoginService:
    """Log of user logins."""

    TABLE = LogLogin.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, LogLogin)

    def insert(self, data: LogLogin) -> LogLogin:
        data = dataclasses.replace(data, create_by="0", update_by="0")
        try:
            return self.store.insert(self.TABLE, data)
        except BizError as exc:
            logger.warning("could not write login log: %s", exc)
            return data

    def find_one(self, info_id: int) -> LogLogin:
        with _guard("failed to query the login log"):
            found = self.store.first(self.TABLE, LogLogin, Query().where("info_id = ?", info_id))
            if found is None:
                raise BizError(f"login log {info_id} not found", 404)
        return found

    def find_list_page(self, page: int, page_size: int,
                       data: LogLogin | None = None) -> tuple[list[LogLogin], int]:
        data = data or LogLogin()
        query = Query()
        if data.status:
            query = query.where("status = ?", data.status)
        if data.login_location:
            query = query.where("login_location like ?", f"%{data.login_location}%")
        if data.username:
            query = query.where("username like ?", f"%{data.username}%")
        query = query.where("delete_time IS NULL")
        with _guard("failed to query the login log page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, LogLogin,
                query.order_by("info_id desc").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def update(self, data: LogLogin) -> LogLogin:
        with _guard("failed to update the login log"):
            self.store.update(self.TABLE, "info_id", data)
        return data

    def delete(self, info_ids: list[int]) -> None:
        with _guard("failed to delete login logs"):
            self.store.delete(self.TABLE, "info_id", info_ids)

    def delete_all(self) -> None:
        self.store.execute("DELETE FROM log_logins")


class LogOperService:
    """Log of user operations."""

    TABLE = LogOper.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, LogOper)

    def insert(self, data: LogOper) -> LogOper:
        try:
            return self.store.insert(self.TABLE, data)
        except BizError as exc:
            logger.warning("could not write operation log: %s", exc)
            return data

    def find_one(self, oper_id: int) -> LogOper:
        with _guard("failed to query the operation log"):
            found = self.store.first(self.TABLE, LogOper, Query().where("oper_id = ?", oper_id))
            if found is None:
                raise BizError(f"operation log {oper_id} not found", 404)
        return found

    def find_list_page(self, page: int, page_size: int,
                       data: LogOper | None = None) -> tuple[list[LogOper], int]:
        data = data or LogOper()
        query = Query()
        if data.business_type:
            query = query.where("business_type = ?", data.business_type)
        if data.oper_location:
            query = query.where("oper_location like ?", f"%{data.oper_location}%")
        if data.title:
            query = query.where("title like ?", f"%{data.title}%")
        if data.oper_name:
            query = query.where("oper_name like ?", f"%{data.oper_name}%")
        query = query.where("delete_time IS NULL")
        with _guard("failed to query the operation log page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, LogOper,
                query.order_by("create_time desc").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def delete(self, oper_ids: list[int]) -> None:
        with _guard("failed to delete operation logs"):
            self.store.delete(self.TABLE, "oper_id", oper_ids)

    def delete_all(self) -> None:
        self.store.execute("DELETE FROM log_opers")
"""Service over scheduled job definitions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from pandax.common import BizError, page_offset
from pandax.models import SysJob
from pandax.store import Query, Store

logger = logging.getLogger(__name__)


@contextmanager
def _guard(message: str) -> Iterator[None]:
    try:
        yield
    except BizError as exc:
        raise BizError(message) from exc


def _filters(data: SysJob) -> Query:
    query = Query()
    if data.job_name:
        query = query.where("job_name like ?", f"%{data.job_name}%")
    if data.status:
        query = query.where("status = ?", data.status)
    if data.job_group:
        query = query.where("job_group = ?", data.job_group)
    return query


class JobService:
    """Stored job definitions and their scheduler entry ids."""

    TABLE = SysJob.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, SysJob)

    def insert(self, data: SysJob) -> SysJob:
        try:
            return self.store.insert(self.TABLE, data)
        except BizError as exc:
            logger.warning("could not add job: %s", exc)
            return data

    def find_one(self, job_id: int) -> SysJob:
        with _guard("failed to query the job"):
            found = self.store.first(self.TABLE, SysJob, Query().where("job_id = ?", job_id))
            if found is None:
                raise BizError(f"job {job_id} not found", 404)
        return found

    def find_list_page(self, page: int, page_size: int,
                       data: SysJob | None = None) -> tuple[list[SysJob], int]:
        query = _filters(data or SysJob()).where("delete_time IS NULL")
        with _guard("failed to query the job page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, SysJob,
                query.order_by("create_time desc").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def find_list(self, data: SysJob | None = None) -> list[SysJob]:
        query = _filters(data or SysJob()).order_by("create_time desc")
        try:
            return self.store.find(self.TABLE, SysJob, query)
        except BizError as exc:
            logger.error("failed to query jobs: %s", exc)
            return []

    def update(self, data: SysJob) -> SysJob:
        with _guard("failed to update the job"):
            self.store.update(self.TABLE, "job_id", data)
        return data

    def delete(self, job_ids: list[int]) -> None:
        with _guard("failed to delete jobs"):
            self.store.delete(self.TABLE, "job_id", job_ids)

    def find_by_entry_id(self, entry_id: int) -> SysJob:
        with _guard("failed to query the job by entry id"):
            found = self.store.first(self.TABLE, SysJob, Query().where("entry_id = ?", entry_id))
            if found is None:
                raise BizError(f"no job with entry id {entry_id}", 404)
        return found

    def remove_all_entry_ids(self) -> None:
        """Forget the scheduler entry of every job."""
        self.store.set_column(self.TABLE, "entry_id", 0, Query().where("entry_id > ?", 0))

    def remove_entry_id(self, entry_id: int) -> None:
        self.store.set_column(self.TABLE, "entry_id", 0, Query().where("entry_id = ?", entry_id))
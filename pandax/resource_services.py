"""Services over mail accounts and object-storage accounts."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from pandax.common import BizError, page_offset
from pandax.models import ResEmail, ResOss
from pandax.store import Query, Store


@contextmanager
def _guard(message: str) -> Iterator[None]:
    try:
        yield
    except BizError as exc:
        raise BizError(message) from exc


def _email_filters(data: ResEmail) -> Query:
    query = Query()
    if data.mail_id:
        query = query.where("mail_id = ?", data.mail_id)
    if data.status:
        query = query.where("status = ?", data.status)
    if data.category:
        query = query.where("category = ?", data.category)
    return query.where("delete_time IS NULL")


class ResEmailService:
    """Configured outgoing mail accounts."""

    TABLE = ResEmail.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, ResEmail)

    def insert(self, data: ResEmail) -> ResEmail:
        with _guard("failed to add the mail account"):
            return self.store.insert(self.TABLE, data)

    def find_one(self, mail_id: int) -> ResEmail:
        with _guard("failed to query the mail account"):
            found = self.store.first(self.TABLE, ResEmail, Query().where("mail_id = ?", mail_id))
            if found is None:
                raise BizError(f"mail account {mail_id} not found", 404)
        return found

    def find_list_page(self, page: int, page_size: int,
                       data: ResEmail | None = None) -> tuple[list[ResEmail], int]:
        query = _email_filters(data or ResEmail())
        with _guard("failed to query the mail account page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, ResEmail,
                query.order_by("create_time").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def find_list(self, data: ResEmail | None = None) -> list[ResEmail]:
        query = _email_filters(data or ResEmail()).order_by("create_time")
        with _guard("failed to query mail accounts"):
            return self.store.find(self.TABLE, ResEmail, query)

    def update(self, data: ResEmail) -> ResEmail:
        with _guard("failed to update the mail account"):
            self.store.update(self.TABLE, "mail_id", data)
        return data

    def delete(self, mail_ids: list[int]) -> None:
        with _guard("failed to delete mail accounts"):
            self.store.delete(self.TABLE, "mail_id", mail_ids)


class ResOssService:
    """Configured object-storage accounts."""

    TABLE = ResOss.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, ResOss)

    def insert(self, data: ResOss) -> ResOss:
        with _guard("failed to add the storage account"):
            return self.store.insert(self.TABLE, data)

    def find_one(self, oss_id: int) -> ResOss:
        with _guard("failed to query the storage account"):
            found = self.store.first(self.TABLE, ResOss, Query().where("oss_id = ?", oss_id))
            if found is None:
                raise BizError(f"storage account {oss_id} not found", 404)
        return found

    def find_list_page(self, page: int, page_size: int,
                       data: ResOss | None = None) -> tuple[list[ResOss], int]:
        data = data or ResOss()
        query = Query()
        if data.oss_id:
            query = query.where("oss_id = ?", data.oss_id)
        if data.oss_code:
            query = query.where("oss_code = ?", data.oss_code)
        if data.status:
            query = query.where("status = ?", data.status)
        if data.category:
            query = query.where("category = ?", data.category)
        query = query.where("delete_time IS NULL")
        with _guard("failed to query the storage account page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, ResOss,
                query.order_by("create_time").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def find_list(self, data: ResOss | None = None) -> list[ResOss]:
        """Enabled accounts only, optionally narrowed by id or code."""
        data = data or ResOss()
        query = Query()
        if data.oss_id:
            query = query.where("oss_id = ?", data.oss_id)
        if data.oss_code:
            query = query.where("oss_code = ?", data.oss_code)
        query = query.where("status = '0' AND delete_time IS NULL").order_by("create_time")
        with _guard("failed to query storage accounts"):
            return self.store.find(self.TABLE, ResOss, query)

    def update(self, data: ResOss) -> ResOss:
        with _guard("failed to update the storage account"):
            self.store.update(self.TABLE, "oss_id", data)
        return data

    def delete(self, oss_ids: list[int]) -> None:
        with _guard("failed to delete storage accounts"):
            self.store.delete(self.TABLE, "oss_id", oss_ids)
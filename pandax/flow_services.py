"""Service over workflow classifications."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from pandax.common import BizError, page_offset
from pandax.models import FlowWorkClassify
from pandax.store import Query, Store


@contextmanager
def _guard(message: str) -> Iterator[None]:
    try:
        yield
    except BizError as exc:
        raise BizError(message) from exc


def _filters(data: FlowWorkClassify) -> Query:
    query = Query()
    if data.name:
        query = query.where("name like ?", f"%{data.name}%")
    if data.creator:
        query = query.where("creator = ?", data.creator)
    return query


class FlowWorkClassifyService:
    """Categories that workflow processes are filed under."""

    TABLE = FlowWorkClassify.TABLE

    def __init__(self, store: Store) -> None:
        self.store = store
        store.create_table(self.TABLE, FlowWorkClassify)

    def insert(self, data: FlowWorkClassify) -> FlowWorkClassify:
        with _guard("failed to add the workflow category"):
            return self.store.insert(self.TABLE, data)

    def find_one(self, classify_id: int) -> FlowWorkClassify:
        with _guard("failed to query the workflow category"):
            found = self.store.first(self.TABLE, FlowWorkClassify, Query().where("id = ?", classify_id))
            if found is None:
                raise BizError(f"workflow category {classify_id} not found", 404)
        return found

    def find_list_page(self, page: int, page_size: int,
                       data: FlowWorkClassify | None = None) -> tuple[list[FlowWorkClassify], int]:
        query = _filters(data or FlowWorkClassify())
        with _guard("failed to query the workflow category page"):
            total = self.store.count(self.TABLE, query)
            rows = self.store.find(
                self.TABLE, FlowWorkClassify,
                query.order_by("create_time").limit(page_size, page_offset(page, page_size)),
            )
        return rows, total

    def find_list(self, data: FlowWorkClassify | None = None) -> list[FlowWorkClassify]:
        query = _filters(data or FlowWorkClassify()).order_by("create_time")
        with _guard("failed to query workflow categories"):
            return self.store.find(self.TABLE, FlowWorkClassify, query)

    def update(self, data: FlowWorkClassify) -> FlowWorkClassify:
        with _guard("failed to update the workflow category"):
            self.store.update(self.TABLE, "id", data)
        return data

    def delete(self, ids: list[int]) -> None:
        with _guard("failed to delete workflow categories"):
            self.store.delete(self.TABLE, "id", ids)
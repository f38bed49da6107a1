"""Shared helpers: business errors, paging and small request forms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class BizError(Exception):
    """A business rule was broken or a storage operation failed."""

    def __init__(self, message: str, code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


def _plain(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass
class ResultPage:
    """One page of a listing together with the total row count."""

    total: int = 0
    page_num: int = 1
    page_size: int = 10
    data: Any = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "pageNum": self.page_num,
            "pageSize": self.page_size,
            "data": _plain(self.data),
        }


@dataclass
class JobStatus:
    """Request form that switches a scheduled job on or off."""

    job_id: int = 0
    status: str = ""


@dataclass
class SendMail:
    """Request form for sending a test mail through a configured account."""

    mail_id: int = 0
    to: str = ""
    subject: str = ""
    body: str = ""


def parse_ids(text: str | None) -> list[int]:
    """Turn a comma separated id list such as ``"1,2,3"`` into integers."""
    if not text:
        return []
    ids = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise BizError(f"invalid id: {part!r}") from None
    return ids


def page_offset(page: int, page_size: int) -> int:
    """Row offset of the first record on a 1-based page."""
    return page_size * (page - 1)
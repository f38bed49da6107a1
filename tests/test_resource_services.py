from datetime import datetime

import pytest

from pandax.common import BizError
from pandax.models import ResEmail, ResOss
from pandax.resource_services import ResEmailService, ResOssService
from pandax.store import Store


@pytest.fixture
def store():
    with Store() as s:
        yield s


def test_email_insert_and_find_one(store):
    service = ResEmailService(store)
    secret = "secret"
    saved = service.insert(ResEmail(host="smtp.example.com", port=465, from_="ops@example.com",
                                    secret=secret, is_ssl=True, status="0"))
    got = service.find_one(saved.mail_id)
    assert got == saved
    assert got.from_ == "ops@example.com"


def test_email_find_one_missing_raises(store):
    with pytest.raises(BizError):
        ResEmailService(store).find_one(2)


def test_email_page_filters(store):
    service = ResEmailService(store)
    service.insert(ResEmail(host="a.example.com", category="0", status="0",
                            create_time=datetime(2022, 1, 1)))
    service.insert(ResEmail(host="b.example.com", category="1", status="0",
                            create_time=datetime(2022, 1, 2)))
    service.insert(ResEmail(host="c.example.com", category="1", status="1",
                            create_time=datetime(2022, 1, 3)))
    rows, total = service.find_list_page(1, 10, ResEmail(category="1"))
    assert [r.host for r in rows] == ["b.example.com", "c.example.com"]
    assert total == len(rows)
    enabled = service.find_list(ResEmail(status="0"))
    assert [r.host for r in enabled] == ["a.example.com", "b.example.com"]


def test_email_update_and_delete(store):
    service = ResEmailService(store)
    saved = service.insert(ResEmail(host="a.example.com", status="0"))
    service.update(ResEmail(mail_id=saved.mail_id, status="1"))
    got = service.find_one(saved.mail_id)
    assert (got.host, got.status) == ("a.example.com", "1")
    service.delete([saved.mail_id])
    assert service.find_list() == []


def test_oss_find_list_returns_enabled_only(store):
    service = ResOssService(store)
    service.insert(ResOss(oss_code="main", status="0"))
    service.insert(ResOss(oss_code="main", status="1"))
    service.insert(ResOss(oss_code="backup", status="0"))
    rows = service.find_list(ResOss(oss_code="main"))
    assert [(r.oss_code, r.status) for r in rows] == [("main", "0")]


def test_oss_page_includes_disabled_accounts(store):
    service = ResOssService(store)
    service.insert(ResOss(oss_code="main", status="0", category="0"))
    service.insert(ResOss(oss_code="main", status="1", category="0"))
    rows, total = service.find_list_page(1, 10, ResOss(oss_code="main"))
    assert {r.status for r in rows} == {"0", "1"}
    assert total == len(rows)


def test_oss_update_find_one_and_delete(store):
    service = ResOssService(store)
    saved = service.insert(ResOss(bucket_name="files", endpoint="oss.example.com", status="0"))
    service.update(ResOss(oss_id=saved.oss_id, bucket_name="media"))
    got = service.find_one(saved.oss_id)
    assert (got.bucket_name, got.endpoint) == ("media", "oss.example.com")
    service.delete([saved.oss_id])
    with pytest.raises(BizError):
        service.find_one(saved.oss_id)


def test_oss_update_without_id_raises(store):
    with pytest.raises(BizError):
        ResOssService(store).update(ResOss(status="1"))
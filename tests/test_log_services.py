from datetime import datetime

import pytest

from pandax.common import BizError
from pandax.log_services import LogJobService, LogLoginService, LogOperService
from pandax.models import LogJob, LogLogin, LogOper
from pandax.store import Store


@pytest.fixture
def store():
    with Store() as s:
        yield s


def test_job_log_page_filters_by_group_newest_first(store):
    service = LogJobService(store)
    for name, group in [("a", "g1"), ("b", "g2"), ("c", "g1")]:
        service.insert(LogJob(name=name, job_group=group))
    rows, total = service.find_list_page(1, 10, LogJob(job_group="g1"))
    assert [r.name for r in rows] == ["c", "a"]
    assert total == len(rows)


def test_job_log_pages_cover_all_rows_once(store):
    service = LogJobService(store)
    saved = [service.insert(LogJob(name=n)) for n in ("a", "b", "c")]
    first, total = service.find_list_page(1, 2)
    second, _ = service.find_list_page(2, 2)
    ids = [r.log_id for r in first + second]
    assert sorted(ids) == sorted(s.log_id for s in saved)
    assert total == len(saved)


def test_job_log_name_is_matched_partially(store):
    service = LogJobService(store)
    service.insert(LogJob(name="backup-db"))
    service.insert(LogJob(name="report"))
    rows, _ = service.find_list_page(1, 10, LogJob(name="back"))
    assert [r.name for r in rows] == ["backup-db"]


def test_job_log_delete_and_delete_all(store):
    service = LogJobService(store)
    a, b, c = (service.insert(LogJob(name=n)) for n in ("a", "b", "c"))
    service.delete([a.log_id])
    rows, _ = service.find_list_page(1, 10)
    assert {r.name for r in rows} == {"b", "c"}
    service.delete_all()
    assert service.find_list_page(1, 10) == ([], 0)


def test_login_insert_marks_creator(store):
    service = LogLoginService(store)
    saved = service.insert(LogLogin(username="alice", create_by="someone"))
    got = service.find_one(saved.info_id)
    assert got.create_by == "0"
    assert got.update_by == "0"
    assert got.username == "alice"


def test_login_find_one_missing_raises(store):
    with pytest.raises(BizError):
        LogLoginService(store).find_one(99)


def test_login_update_changes_fields(store):
    service = LogLoginService(store)
    saved = service.insert(LogLogin(username="alice", status="0"))
    service.update(LogLogin(info_id=saved.info_id, status="1"))
    got = service.find_one(saved.info_id)
    assert (got.username, got.status) == ("alice", "1")


def test_login_update_without_id_raises(store):
    with pytest.raises(BizError):
        LogLoginService(store).update(LogLogin(status="1"))


def test_login_page_filters(store):
    service = LogLoginService(store)
    service.insert(LogLogin(username="alice", login_location="Shanghai"))
    service.insert(LogLogin(username="bob", login_location="Beijing"))
    by_name, _ = service.find_list_page(1, 10, LogLogin(username="ali"))
    by_place, _ = service.find_list_page(1, 10, LogLogin(login_location="jing"))
    assert [r.username for r in by_name] == ["alice"]
    assert [r.username for r in by_place] == ["bob"]


def test_login_delete_and_delete_all(store):
    service = LogLoginService(store)
    a = service.insert(LogLogin(username="alice"))
    service.insert(LogLogin(username="bob"))
    service.delete([a.info_id])
    with pytest.raises(BizError):
        service.find_one(a.info_id)
    service.delete_all()
    assert service.find_list_page(1, 10)[1] == 0


def test_oper_page_filters_and_orders_by_create_time(store):
    service = LogOperService(store)
    service.insert(LogOper(title="user add", business_type="1", create_time=datetime(2022, 1, 1)))
    service.insert(LogOper(title="user edit", business_type="2", create_time=datetime(2022, 1, 2)))
    service.insert(LogOper(title="role add", business_type="1", create_time=datetime(2022, 1, 3)))
    rows, total = service.find_list_page(1, 10, LogOper(title="add"))
    assert [r.title for r in rows] == ["role add", "user add"]
    typed, _ = service.find_list_page(1, 10, LogOper(business_type="2"))
    assert [r.title for r in typed] == ["user edit"]
    assert total == len(rows)


def test_oper_find_one_and_delete(store):
    service = LogOperService(store)
    saved = service.insert(LogOper(title="export", oper_name="admin"))
    assert service.find_one(saved.oper_id) == saved
    service.delete([saved.oper_id])
    with pytest.raises(BizError):
        service.find_one(saved.oper_id)


def test_oper_delete_all(store):
    service = LogOperService(store)
    service.insert(LogOper(title="a"))
    service.delete_all()
    assert service.find_list_page(1, 10) == ([], 0)
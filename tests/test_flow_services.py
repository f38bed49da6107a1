from datetime import datetime

import pytest

from pandax.common import BizError
from pandax.flow_services import FlowWorkClassifyService
from pandax.models import FlowWorkClassify
from pandax.store import Store


@pytest.fixture
def service():
    with Store() as s:
        yield FlowWorkClassifyService(s)


def test_insert_and_find_one(service):
    saved = service.insert(FlowWorkClassify(name="HR", creator=1))
    assert service.find_one(saved.id) == saved


def test_find_one_missing_raises(service):
    with pytest.raises(BizError):
        service.find_one(3)


def test_find_list_page_filters_by_name_and_creator(service):
    service.insert(FlowWorkClassify(name="HR leave", creator=1, create_time=datetime(2022, 1, 2)))
    service.insert(FlowWorkClassify(name="HR hiring", creator=2, create_time=datetime(2022, 1, 1)))
    service.insert(FlowWorkClassify(name="IT", creator=1, create_time=datetime(2022, 1, 3)))
    rows, total = service.find_list_page(1, 10, FlowWorkClassify(name="HR"))
    assert [r.name for r in rows] == ["HR hiring", "HR leave"]
    assert total == len(rows)
    mine, _ = service.find_list_page(1, 10, FlowWorkClassify(creator=1))
    assert [r.name for r in mine] == ["HR leave", "IT"]


def test_find_list_orders_by_create_time(service):
    service.insert(FlowWorkClassify(name="b", create_time=datetime(2022, 2, 1)))
    service.insert(FlowWorkClassify(name="a", create_time=datetime(2022, 1, 1)))
    assert [r.name for r in service.find_list()] == ["a", "b"]


def test_update_changes_name(service):
    saved = service.insert(FlowWorkClassify(name="old", creator=4))
    service.update(FlowWorkClassify(id=saved.id, name="new"))
    got = service.find_one(saved.id)
    assert (got.name, got.creator) == ("new", 4)


def test_update_without_id_raises(service):
    with pytest.raises(BizError):
        service.update(FlowWorkClassify(name="x"))


def test_delete(service):
    a = service.insert(FlowWorkClassify(name="a"))
    b = service.insert(FlowWorkClassify(name="b"))
    service.delete([a.id])
    assert [r.id for r in service.find_list()] == [b.id]
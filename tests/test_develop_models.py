from datetime import datetime

from pandax.develop_models import (
    DBColumns,
    DBTables,
    DevGenTable,
    DevGenTableColumn,
    TableInfoVo,
)


def _column(**kwargs):
    values = dict(column_id=3, table_id=7, column_name="user_name", go_field="UserName",
                  json_field="userName", sort=2)
    values.update(kwargs)
    return DevGenTableColumn(**values)


def test_column_json_names():
    data = _column().to_dict()
    assert data["columnId"] == 3
    assert data["tableId"] == 7
    assert data["goField"] == "UserName"
    assert data["linkTableName"] == ""


def test_column_round_trip():
    column = _column(link_table_name="sys_dept", is_pk="1")
    assert DevGenTableColumn.from_dict(column.to_dict()) == column


def test_column_from_dict_accepts_snake_names_and_ignores_unknown():
    column = DevGenTableColumn.from_dict({"column_name": "age", "sort": 4, "bogus": 1})
    assert column.column_name == "age"
    assert column.sort == 4
    assert column.go_type == ""


def test_table_json_names_and_columns():
    table = DevGenTable(table_id=1, table_name="sys_user", pk_json_field="userId",
                        columns=[_column()])
    data = table.to_dict()
    assert data["tableId"] == 1
    assert data["pkJsonField"] == "userId"
    assert data["columns"] == [_column().to_dict()]


def test_table_round_trip_with_times():
    moment = datetime(2022, 8, 4, 15, 52)
    table = DevGenTable(table_id=5, table_name="orders", class_name="Orders",
                        create_time=moment, columns=[_column(table_id=5)])
    back = DevGenTable.from_dict(table.to_dict())
    assert back == table
    assert back.create_time == moment


def test_table_from_dict_builds_column_objects():
    table = DevGenTable.from_dict({"tableName": "t", "columns": [{"columnName": "a"}]})
    assert table.columns == [DevGenTableColumn(column_name="a")]


def test_table_from_dict_without_columns():
    table = DevGenTable.from_dict({"tableName": "t"})
    assert table.columns == []
    assert table.table_name == "t"


def test_table_info_vo_to_dict():
    table = DevGenTable(table_id=2, table_name="t", columns=[_column()])
    vo = TableInfoVo(list=table.columns, info=table)
    data = vo.to_dict()
    assert set(data) == {"list", "info"}
    assert data["list"] == [c.to_dict() for c in table.columns]
    assert data["info"]["tableName"] == "t"


def test_catalogue_records_take_catalogue_rows():
    row = {"table_name": "users", "column_name": "id", "column_key": "PRI"}
    column = DBColumns(**row)
    assert column.column_key == "PRI"
    assert DBTables(table_name="users").table_name == "users"
import pytest

from pandax.codegen import ColumnTools
from pandax.develop_models import DBColumns


@pytest.fixture
def tools():
    return ColumnTools()


def col(name, column_type, key="", extra="", comment=""):
    return DBColumns(column_name=name, column_type=column_type, column_key=key,
                     extra=extra, column_comment=comment)


def test_get_db_type(tools):
    assert tools.get_db_type("varchar(255)") == "varchar"
    assert tools.get_db_type("datetime") == "datetime"
    assert tools.get_db_type("(x)") == "(x)"


def test_get_column_length(tools):
    assert tools.get_column_length("varchar(500)") == 50
    assert tools.get_column_length("text") == 0
    assert tools.get_column_length("x(1)") == 0


def test_type_classification(tools):
    assert tools.is_string_object("varchar")
    assert tools.is_time_object("timestamptz")
    assert tools.is_number_object("bigint")
    assert not tools.is_number_object("varchar")
    assert not tools.is_string_object("bool")


def test_name_rules(tools):
    assert tools.is_not_edit("user_id")
    assert tools.is_not_edit("create_by")
    assert not tools.is_not_edit("remark")
    assert tools.is_not_list("update_time")
    assert not tools.is_not_list("create_time")
    assert tools.is_not_query("remark")
    assert tools.check_name_column("user_name")
    assert not tools.check_name_column("nam")
    assert tools.check_status_column("status")
    assert tools.check_type_column("dict_type")
    assert tools.check_sex_column("sex")
    assert not tools.check_sex_column("se")


@pytest.mark.parametrize("column_type,html", [
    ("varchar(5000)", "textarea"),
    ("varchar(20)", "input"),
])
def test_string_column(tools, column_type, html):
    column = tools.init_column(col("remark", column_type), 1)
    assert column.go_type == "string"
    assert column.html_type == html


def test_time_column(tools):
    column = tools.init_column(col("create_time", "datetime"), 2)
    assert column.go_type == "Time"
    assert column.html_type == "datetime"
    assert column.is_insert == "0"
    assert column.is_edit == "0"
    assert column.is_list == "1"
    assert column.is_query == "0"
    assert column.sort == 2


@pytest.mark.parametrize("column_type,go_type", [
    ("int(11)", "int"),
    ("int(10) unsigned", "uint"),
    ("bigint(20)", "int64"),
    ("bigint(20) unsigned", "uint64"),
    ("decimal(10,2)", "float64"),
])
def test_number_columns_mysql(tools, column_type, go_type):
    column = tools.init_column(col("amount", column_type), 1, "mysql")
    assert column.html_type == "input"
    assert column.go_type == go_type


def test_number_column_postgres_uses_raw_type(tools):
    column = tools.init_column(col("amount", "int8"), 1, "postgresql")
    assert column.go_type == "int64"


def test_bool_column(tools):
    column = tools.init_column(col("enabled", "bool"), 1)
    assert column.go_type == "bool"
    assert column.html_type == "switch"


def test_primary_key_column(tools):
    column = tools.init_column(col("user_id", "bigint(20)", key="PRI", extra="auto_increment"), 1)
    assert column.is_pk == "1"
    assert column.is_increment == "1"
    assert column.is_edit == "0"
    assert column.column_comment == column.go_field


def test_field_names_and_flags(tools):
    column = tools.init_column(col("user_name", "varchar(64)", comment="user"), 1)
    assert column.go_field.lower() == "username"
    assert column.go_field[0].isupper()
    assert column.json_field[0].islower()
    assert column.json_field[1:] == column.go_field[1:]
    assert column.is_required == "1"
    assert column.is_insert == "1"
    assert column.is_edit == "1"
    assert column.query_type == "LIKE"
    assert column.column_comment == "user"


def test_status_and_type_html(tools):
    assert tools.init_column(col("status", "varchar(1)"), 1).html_type == "radio"
    assert tools.init_column(col("dict_type", "varchar(10)"), 1).html_type == "select"
    assert tools.init_column(col("sex", "varchar(1)"), 1).query_type == "EQ"


def test_gen_table_init(tools):
    columns = [
        col("id", "bigint(20)", key="PRI", extra="auto_increment"),
        col("role_name", "varchar(64)"),
    ]
    table = tools.gen_table_init("sys_user_role", columns)
    assert table.class_name == "SysUserRole"
    assert table.business_name == "userRole"
    assert table.function_name == "Role"
    assert table.table_comment == table.class_name
    assert table.module_name == "sys-user-role"
    assert table.package_name == "system"
    assert table.tpl_category == "crud"
    assert table.function_author == "panda"
    assert table.pk_column == "id"
    assert table.pk_go_field == "Id"
    assert table.pk_json_field == "id"
    assert [c.sort for c in table.columns] == [1, 2]
    assert [c.column_name for c in table.columns] == ["id", "role_name"]


def test_gen_table_init_without_columns(tools):
    table = tools.gen_table_init("logs", [])
    assert table.columns == []
    assert table.pk_column == ""
    assert table.business_name == ""
    assert table.class_name == "Logs"
# pandax

Back-end building blocks for an administration console: services over a
SQLite database and Flask blueprints that expose them as a JSON API.

- **Scheduled jobs** – a cron scheduler with a seconds field
  (`pandax.jobs.Scheduler`, `CronSchedule`, `new_with_seconds`), HTTP and
  in-process jobs (`HttpJob`, `ExecJob`) run through a `JobRunner`, and the
  stored job catalogue (`pandax.job_services.JobService`).
- **Logs** – job-run, login and operation logs
  (`pandax.log_services.LogJobService`, `LogLoginService`, `LogOperService`)
  with filtered, paged listing.
- **Resources** – mail-account and object-storage-account settings
  (`pandax.resource_services.ResEmailService`, `ResOssService`).
- **Work-flow** – work-flow categories
  (`pandax.flow_services.FlowWorkClassifyService`) and the record types of a
  work-flow engine (`FlowWorkInfo`, `FlowWorkOrder`, `FlowWorkOrderTemplate`,
  `FlowWorkStage`, `FlowWorkTask`, `FlowWorkTaskHistory`,
  `FlowWorkTemplates` in `pandax.models`).
- **Code-generation settings** – imports tables from the database catalogue
  (`pandax.develop_services.GenTableService`, `GenTableColumnService`) and
  derives field names, types and form settings for each column
  (`pandax.codegen.ColumnTools`).

## Records

Every stored record is a dataclass derived from `pandax.models.Record`. It
carries `create_time`, `update_time` and `delete_time` and converts to and
from the camel-case JSON used by the API:

```python
from pandax.models import SysJob

job = SysJob.from_dict({"jobName": "nightly", "cronExpression": "0 0 2 * * *"})
payload = job.to_dict()
```

The code-generation records (`DevGenTable`, `DevGenTableColumn`,
`TableInfoVo`, `DBTables`, `DBColumns`) live in `pandax.develop_models`.

`pandax.common` holds `BizError` (raised for failed lookups and rejected
operations; its `code` is 404 when a record is not found), `ResultPage`
(`to_dict()` gives `total`, `pageNum`, `pageSize` and `data`),
`parse_ids("1,2,3")` → `[1, 2, 3]`, and `page_offset(page, page_size)`.

## Storage

`pandax.store.Store` wraps one SQLite database (`":memory:"` by default).
Each service creates its table when it is constructed:

```python
from pandax.store import Store
from pandax.log_services import LogLoginService
from pandax.models import LogLogin

store = Store("pandax.db", "sqlite")
logins = LogLoginService(store)
logins.insert(LogLogin(username="alice", status="0"))

rows, total = logins.find_list_page(1, 10, LogLogin(username="alice"))
```

`Query` builds filter, order and paging conditions; a list argument to
`Query.where` expands to one placeholder per item. `Store.update` writes only
the non-empty fields of a record and refreshes `update_time`.

## Scheduling

Expressions have six fields, `sec min hour day-of-month month [day-of-week]`
(day-of-week may be left out), or are one of `@yearly`, `@monthly`,
`@weekly`, `@daily`, `@midnight`, `@hourly` or `@every <duration>` such as
`@every 1m30s`.

```python
from datetime import datetime
from pandax.jobs import CronSchedule

CronSchedule.parse("*/15 * * * * *").next_after(datetime(2024, 1, 1, 0, 0, 1))
# datetime(2024, 1, 1, 0, 0, 15)
```

`JobRunner.setup()` loads the enabled jobs of group `SYSTEM`, schedules them,
stores their entry ids and starts the scheduler. An `HttpJob` requests its
`invoke_target` URL, retrying up to three times; an `ExecJob` calls the
handler registered under its `invoke_target` (`default_handlers()` provides
`cronHandle`). Each run is written to the job log. Misfire policy `"1"`
removes the job after one run, `"2"` removes it when the handler is missing
or fails.

## Code-generation settings

```python
from pandax.codegen import ColumnTools
from pandax.develop_models import DBColumns

table = ColumnTools().gen_table_init(
    "sys_user",
    [DBColumns(column_name="user_id", column_type="bigint", column_key="PRI",
               extra="auto_increment"),
     DBColumns(column_name="user_name", column_type="varchar(64)")],
)
table.class_name       # "SysUser"
table.pk_json_field    # "userId"
```

## Web API

Each area has a Flask blueprint. Responses are JSON objects with `code`,
`msg` and `data`; a `BizError` becomes an error response with its code.

```python
from flask import Flask

from pandax.codegen import ColumnTools
from pandax.develop_services import GenTableColumnService, GenTableService
from pandax.flow_services import FlowWorkClassifyService
from pandax.job_services import JobService
from pandax.jobs import JobRunner, default_handlers, new_with_seconds
from pandax.log_services import LogJobService, LogLoginService, LogOperService
from pandax.store import Store
from pandax.web_develop import create_develop_blueprint
from pandax.web_flow import create_flow_blueprint
from pandax.web_job import create_job_blueprint
from pandax.web_log import create_log_blueprint

store = Store("pandax.db", "sqlite")
jobs = JobService(store)
runner = JobRunner(new_with_seconds(), jobs, LogJobService(store), default_handlers())

app = Flask(__name__)
app.register_blueprint(create_job_blueprint(jobs, runner))
app.register_blueprint(create_flow_blueprint(FlowWorkClassifyService(store)))
app.register_blueprint(
    create_log_blueprint(LogJobService(store), LogLoginService(store), LogOperService(store))
)
app.register_blueprint(
    create_develop_blueprint(GenTableService(store, GenTableColumnService(store)), ColumnTools())
)
```

| Prefix | Routes |
| --- | --- |
| `/job` | `GET /list`, `GET /<id>`, `POST`, `PUT`, `DELETE /<ids>`, `GET /start/<id>`, `GET /stop/<id>`, `GET /changeStatus` |
| `/flow/workclassify` | `GET /list`, `GET /<id>`, `POST`, `PUT`, `DELETE /<ids>` |
| `/log/logJob` | `GET /list`, `DELETE /<ids>`, `DELETE /all` |
| `/log/logLogin` | `GET /list`, `GET /<id>`, `PUT`, `DELETE /<ids>`, `DELETE /all` |
| `/log/logOper` | `GET /list`, `GET /<id>`, `DELETE /<ids>`, `DELETE /all` |
| `/develop/code/table` | `GET /db/list`, `GET /list`, `GET /info/<id>`, `GET /info/tableName`, `GET /tableTree`, `POST ?tables=a,b`, `PUT`, `DELETE /<ids>` |

A job can be started only when its status is `"0"` and it is not already
running.

## What this package does not do

- It has no command and no ready-made application: you build the Flask app
  and run it yourself, as above.
- Storage is SQLite only. The database catalogue used for importing tables is
  read from SQLite's own table list.
- It stores column settings for code generation but renders no source files
  from them, and creates no menus or API records.
- Mail and object-storage accounts can be stored and queried through their
  services, but no mail is sent, no files are uploaded, and there are no HTTP
  routes for these accounts.
- There is no authentication; the job blueprint takes the creator's name from
  `flask.g.user_name` if something else has set it.

## Tests

The test suite uses pytest and is installed with the `test` extra.
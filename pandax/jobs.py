"""Cron scheduling and the runtime side of stored jobs."""

from __future__ import annotations

import dataclasses
import logging
import re
import threading
import time
import urllib.request
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Protocol

from pandax.common import BizError
from pandax.job_services import JobService
from pandax.log_services import LogJobService
from pandax.models import LogJob, SysJob

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_MONTH_NAMES = {name: number for number, name in enumerate(
    ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"), start=1)}
_DOW_NAMES = {name: number for number, name in enumerate(
    ("sun", "mon", "tue", "wed", "thu", "fri", "sat"))}

_DESCRIPTORS = {
    "@yearly": "0 0 0 1 1 *",
    "@annually": "0 0 0 1 1 *",
    "@monthly": "0 0 0 1 * *",
    "@weekly": "0 0 0 * * 0",
    "@daily": "0 0 0 * * *",
    "@midnight": "0 0 0 * * *",
    "@hourly": "0 0 * * * *",
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9, "us": 1e-6, "µs": 1e-6, "μs": 1e-6, "ms": 1e-3, "s": 1.0, "m": 60.0, "h": 3600.0,
}
_SEARCH_YEARS = 5


def _parse_duration(text: str) -> float:
    if text == "0":
        return 0.0
    if not text:
        raise ValueError("empty duration")
    total, pos = 0.0, 0
    while pos < len(text):
        match = _DURATION_PART.match(text, pos)
        if match is None:
            raise ValueError(f"invalid duration: {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return total


def _parse_value(token: str, names: Mapping[str, int]) -> int:
    lowered = token.lower()
    if lowered in names:
        return names[lowered]
    if not token.isdigit():
        raise ValueError(f"invalid cron value: {token!r}")
    return int(token)


def _parse_field(text: str, low: int, high: int,
                 names: Mapping[str, int] | None = None) -> tuple[frozenset[int], bool]:
    names = names or {}
    values: set[int] = set()
    star = False
    for part in text.split(","):
        span, slash, step_text = part.partition("/")
        if span in ("*", "?"):
            start, end, dash, part_star = low, high, "", True
        else:
            first, dash, last = span.partition("-")
            start = _parse_value(first, names)
            end = _parse_value(last, names) if dash else start
            part_star = False
        step = 1
        if slash:
            if not step_text.isdigit() or int(step_text) <= 0:
                raise ValueError(f"invalid cron step: {part!r}")
            step = int(step_text)
            if not dash and not part_star:
                end = high
            if step > 1:
                part_star = False
        if start < low or end > high or start > end:
            raise ValueError(f"cron value out of range: {part!r}")
        values.update(range(start, end + 1, step))
        star = star or part_star
    return frozenset(values), star


@dataclass(frozen=True)
class CronSchedule:
    """A cron schedule with a seconds field, or a fixed interval."""

    seconds: frozenset[int] = frozenset()
    minutes: frozenset[int] = frozenset()
    hours: frozenset[int] = frozenset()
    days: frozenset[int] = frozenset()
    months: frozenset[int] = frozenset()
    weekdays: frozenset[int] = frozenset()
    dom_star: bool = False
    dow_star: bool = False
    interval: timedelta | None = None

    @classmethod
    def parse(cls, expression: str) -> "CronSchedule":
        """Parse ``sec min hour dom month [dow]``, a descriptor or ``@every <duration>``."""
        text = expression.strip()
        if not text:
            raise ValueError("empty cron expression")
        if text.startswith("@every"):
            rest = text[len("@every"):].strip()
            seconds = int(_parse_duration(rest))
            return cls(interval=timedelta(seconds=max(seconds, 1)))
        if text.startswith("@"):
            spec = _DESCRIPTORS.get(text.lower())
            if spec is None:
                raise ValueError(f"unknown cron descriptor: {text!r}")
            return cls.parse(spec)
        fields = text.split()
        if len(fields) == 5:
            fields.append("*")
        if len(fields) != 6:
            raise ValueError(f"expected 5 or 6 cron fields, got {len(fields)}: {text!r}")
        seconds, _ = _parse_field(fields[0], 0, 59)
        minutes, _ = _parse_field(fields[1], 0, 59)
        hours, _ = _parse_field(fields[2], 0, 23)
        days, dom_star = _parse_field(fields[3], 1, 31)
        months, _ = _parse_field(fields[4], 1, 12, _MONTH_NAMES)
        weekdays, dow_star = _parse_field(fields[5], 0, 6, _DOW_NAMES)
        return cls(seconds, minutes, hours, days, months, weekdays, dom_star, dow_star)

    def _day_matches(self, moment: datetime) -> bool:
        dom = moment.day in self.days
        dow = (moment.weekday() + 1) % 7 in self.weekdays
        if self.dom_star or self.dow_star:
            return dom and dow
        return dom or dow

    def next_after(self, moment: datetime) -> datetime | None:
        """The first activation strictly after ``moment``, or None if there is none."""
        start = moment.replace(microsecond=0)
        if self.interval is not None:
            return start + self.interval
        current = start + timedelta(seconds=1)
        last_year = current.year + _SEARCH_YEARS
        while current.year <= last_year:
            if current.month not in self.months:
                first = current.replace(day=1, hour=0, minute=0, second=0)
                current = (first + timedelta(days=32)).replace(day=1)
            elif not self._day_matches(current):
                current = (current + timedelta(days=1)).replace(hour=0, minute=0, second=0)
            elif current.hour not in self.hours:
                current = current.replace(minute=0, second=0) + timedelta(hours=1)
            elif current.minute not in self.minutes:
                current = current.replace(second=0) + timedelta(minutes=1)
            elif current.second not in self.seconds:
                current += timedelta(seconds=1)
            else:
                return current
        return None


@dataclass
class Entry:
    """A scheduled job and the time it runs next."""

    id: int
    schedule: CronSchedule
    job: Callable[[], Any]
    next: datetime | None = None


class Scheduler:
    """Runs callables on cron schedules in a background thread."""

    _MAX_WAIT = 60.0

    def __init__(self) -> None:
        self._entries: dict[int, Entry] = {}
        self._next_id = 0
        self._cond = threading.Condition()
        self._thread: threading.Thread | None = None
        self._running = False

    def __enter__(self) -> "Scheduler":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.stop()

    @property
    def running(self) -> bool:
        return self._running

    def add(self, expression: str, job: Callable[[], Any]) -> int:
        """Schedule a callable; raises ValueError for a bad expression."""
        schedule = CronSchedule.parse(expression)
        with self._cond:
            self._next_id += 1
            entry = Entry(self._next_id, schedule, job, schedule.next_after(datetime.now()))
            self._entries[entry.id] = entry
            self._cond.notify_all()
            return entry.id

    def remove(self, entry_id: int) -> None:
        with self._cond:
            self._entries.pop(entry_id, None)
            self._cond.notify_all()

    def entries(self) -> list[Entry]:
        """Snapshot of the entries, soonest first."""
        with self._cond:
            snapshot = [dataclasses.replace(entry) for entry in self._entries.values()]
        return sorted(snapshot, key=lambda e: (e.next is None, e.next or datetime.min, e.id))

    def start(self) -> None:
        with self._cond:
            if self._running:
                return
            self._running = True
            now = datetime.now()
            for entry in self._entries.values():
                entry.next = entry.schedule.next_after(now)
            self._thread = threading.Thread(target=self._loop, name="scheduler", daemon=True)
            self._thread.start()

    def stop(self) -> None:
        with self._cond:
            self._running = False
            self._cond.notify_all()
            thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    @staticmethod
    def _invoke(job: Callable[[], Any]) -> None:
        try:
            job()
        except Exception:
            logger.exception("scheduled job failed")

    def _loop(self) -> None:
        with self._cond:
            while self._running:
                now = datetime.now()
                for entry in list(self._entries.values()):
                    if entry.next is not None and entry.next <= now:
                        threading.Thread(target=self._invoke, args=(entry.job,), daemon=True).start()
                        entry.next = entry.schedule.next_after(now)
                upcoming = [e.next for e in self._entries.values() if e.next is not None]
                timeout = self._MAX_WAIT
                if upcoming:
                    delay = (min(upcoming) - datetime.now()).total_seconds()
                    timeout = min(max(delay, 0.0), self._MAX_WAIT)
                self._cond.wait(timeout)


@dataclass
class JobCore:
    """What a running job needs to know about its stored definition."""

    invoke_target: str = ""
    name: str = ""
    job_group: str = ""
    job_id: int = 0
    entry_id: int = 0
    cron_expression: str = ""
    misfire_policy: str = ""
    args: str = ""


@dataclass
class HttpJob(JobCore):
    """A job that requests the URL in its invoke target."""


@dataclass
class ExecJob(JobCore):
    """A job that calls a registered handler with its arguments."""


class JobHandler(Protocol):
    def execute(self, arg: Any) -> None: ...


class CronHandle:
    """Example handler that reports its run on standard output."""

    def execute(self, arg: Any) -> None:
        message = datetime.now().strftime(TIME_FORMAT) + " [INFO] JobCore ExamplesOne exec success"
        if isinstance(arg, str):
            print(message, arg if arg else "arg is nil")


def default_handlers() -> dict[str, JobHandler]:
    """Handlers that an invoke target may name."""
    return {"cronHandle": CronHandle()}


def new_with_seconds() -> Scheduler:
    """A scheduler whose expressions start with a seconds field."""
    return Scheduler()


@dataclass
class JobRunner:
    """Connects stored jobs to a scheduler and records each run."""

    scheduler: Scheduler
    job_service: JobService
    log_service: LogJobService
    handlers: Mapping[str, JobHandler] = field(default_factory=default_handlers)
    retry_count: int = 3
    retry_delay: float = 5.0
    timeout: float = 30.0

    def __init__(self, scheduler: Scheduler, job_service: JobService,
                 log_service: LogJobService, handlers: Mapping[str, JobHandler] | None = None) -> None:
        self.scheduler = scheduler
        self.job_service = job_service
        self.log_service = log_service
        self.handlers = default_handlers() if handlers is None else dict(handlers)
        self.retry_count = 3
        self.retry_delay = 5.0
        self.timeout = 30.0

    def add(self, job: JobCore | None) -> int:
        """Schedule a job and return its entry id."""
        if job is None:
            return 0
        try:
            entry_id = self.scheduler.add(job.cron_expression, lambda: self._run(job))
        except ValueError as exc:
            raise BizError("failed to add the job") from exc
        job.entry_id = entry_id
        return entry_id

    def remove(self, entry_id: int) -> None:
        """Stop a job and forget its entry id in storage."""
        self.scheduler.remove(entry_id)
        try:
            self.job_service.remove_entry_id(entry_id)
        except BizError as exc:
            logger.warning("could not clear entry id %s: %s", entry_id, exc)

    def _run(self, job: JobCore) -> None:
        if isinstance(job, HttpJob):
            self.run_http(job)
        else:
            self.run_exec(job)

    def _log_run(self, job: JobCore, started: float) -> None:
        latency = time.monotonic() - started
        self.log_service.insert(LogJob(
            name=job.name,
            job_group=job.job_group,
            entry_id=job.entry_id,
            invoke_target=job.invoke_target,
            log_info=f"job took {latency:f} seconds",
            status="0",
        ))

    def run_exec(self, job: JobCore) -> None:
        started = time.monotonic()
        handler = self.handlers.get(job.invoke_target)
        if handler is None:
            if job.misfire_policy == "2":
                self.remove(job.entry_id)
            return
        try:
            handler.execute(job.args)
        except Exception:
            logger.exception("job %s failed", job.name)
            if job.misfire_policy == "2":
                self.remove(job.entry_id)
                return
        self._log_run(job, started)
        if job.misfire_policy == "1":
            self.remove(job.entry_id)

    def run_http(self, job: JobCore) -> None:
        started = time.monotonic()
        for attempt in range(self.retry_count):
            try:
                with urllib.request.urlopen(job.invoke_target, timeout=self.timeout) as response:
                    response.read()
                break
            except (OSError, ValueError) as exc:
                logger.warning("request for job %s failed: %s", job.name, exc)
                time.sleep((attempt + 1) * self.retry_delay)
        self._log_run(job, started)
        if job.misfire_policy == "1":
            self.remove(job.entry_id)

    def setup(self) -> list[int]:
        """Schedule every enabled system job, start the scheduler and return the entry ids."""
        stored: list[SysJob] = self.job_service.find_list(SysJob(job_group="SYSTEM"))
        if not stored:
            logger.info("%s [INFO] JobCore total:0", datetime.now().strftime(TIME_FORMAT))
            return []
        try:
            self.job_service.remove_all_entry_ids()
        except BizError as exc:
            logger.error("%s [ERROR] JobCore remove entry_id error %s",
                         datetime.now().strftime(TIME_FORMAT), exc)
        entry_ids = []
        for sys_job in stored:
            if sys_job.status != "0" or sys_job.job_type not in ("1", "2"):
                continue
            core = dict(
                invoke_target=sys_job.invoke_target,
                cron_expression=sys_job.cron_expression,
                job_id=sys_job.job_id,
                name=sys_job.job_name,
                job_group=sys_job.job_group,
                misfire_policy=sys_job.misfire_policy,
            )
            job = HttpJob(**core) if sys_job.job_type == "1" else ExecJob(args=sys_job.args, **core)
            try:
                entry_id = self.add(job)
            except BizError as exc:
                logger.error("could not schedule job %s: %s", sys_job.job_name, exc)
                continue
            entry_ids.append(entry_id)
            self.job_service.update(SysJob(job_id=sys_job.job_id, entry_id=entry_id))
        self.scheduler.start()
        logger.info("%s [INFO] JobCore start success.", datetime.now().strftime(TIME_FORMAT))
        return entry_ids
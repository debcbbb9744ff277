"""
Report and timeline builders.

These turn query results into plain rows; the CLI decides how to print them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from timers import query
from timers.models import Log, Task, utcnow
from timers.repo import Repo
from timers.timeparse import format_duration, local_midnight, to_local


@dataclass
class DayRow:
    label: str
    start: datetime
    end: datetime
    duration: timedelta
    task_count: int
    weekend: bool = False

    def to_dict(self) -> dict:
        return {
            'day': self.label,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
            'seconds': int(self.duration.total_seconds()),
            'tasks': self.task_count,
        }


def week_start(now: Optional[datetime] = None, weeks_ago: int = 0, tz: Optional[tzinfo] = None) -> datetime:
    """Local Monday midnight of the current week (or ``weeks_ago`` earlier), as UTC."""
    now = now or utcnow()
    today = to_local(now, tz).date()
    monday = today - timedelta(days=today.weekday() + 7 * weeks_ago)
    return local_midnight(monday, tz)


def _row(repo: Repo, label: str, start: datetime, end: datetime, now: datetime, weekend: bool = False) -> DayRow:
    tasks = query.get_all_tasks_between(repo, start, end, now)
    duration = query.get_total_duration(repo, start, end, now)
    return DayRow(label, start, end, duration, len(tasks), weekend)


def week_report(
    repo: Repo,
    weeks_ago: int = 0,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> tuple[list[DayRow], DayRow]:
    """
    Time logged per day for one week, Monday first.

    Returns:
        (rows for the seven days, total row for the week)
    """
    now = now or utcnow()
    monday = to_local(week_start(now, weeks_ago, tz), tz).date()

    rows = []
    for i in range(7):
        day = monday + timedelta(days=i)
        start = local_midnight(day, tz)
        end = local_midnight(day + timedelta(days=1), tz)
        rows.append(_row(repo, day.strftime('%A'), start, end, now, weekend=i >= 5))

    total = _row(repo, 'Total', rows[0].start, rows[-1].end, now)
    return rows, total


@dataclass
class TimelineRow:
    task: Task
    log: Log
    bar: str

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        return {
            'task_id': self.task.id,
            'task_name': self.task.name,
            'start': self.log.to_dict()['start'],
            'end': self.log.to_dict()['end'],
            'seconds': int(self.log.duration(now).total_seconds()),
        }


def timeline(
    repo: Repo,
    start: datetime,
    end: datetime,
    width: int = 40,
    now: Optional[datetime] = None,
) -> list[TimelineRow]:
    """
    One row per log overlapping [start, end], with a bar of ``width``
    characters placing the log inside the window.
    """
    now = now or utcnow()
    span = (end - start).total_seconds()

    rows = []
    for task, log in query.get_all_logs_between(repo, start, end, now):
        if span <= 0:
            bar = '#' * width
        else:
            offset = int((log.start - start).total_seconds() / span * width)
            length = round(log.duration(now).total_seconds() / span * width)
            offset = min(max(offset, 0), width - 1)
            length = min(max(length, 1), width - offset)
            bar = '.' * offset + '#' * length + '.' * (width - offset - length)
        rows.append(TimelineRow(task, log, bar))
    return rows


def format_timeline_row(row: TimelineRow, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> str:
    begin = to_local(row.log.start, tz).strftime('%H:%M')
    if row.log.end is None:
        finish = 'now  '
    else:
        finish = to_local(row.log.end, tz).strftime('%H:%M')
    duration = format_duration(row.log.duration(now))
    return f"{begin}-{finish} |{row.bar}| @{row.task.id}: {row.task.name} ({duration})"

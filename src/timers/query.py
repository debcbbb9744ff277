"""
Range queries over every task in a repository.

The two queries use different membership rules:

- get_all_tasks_between() keeps tasks having a log that *starts or ends*
  inside the window. A task whose only log spans the whole window is not
  included.
- get_all_logs_between() keeps every log that *overlaps* the window.
"""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Optional

from timers.errors import TaskValueError
from timers.models import ZERO, Log, Task, utcnow
from timers.repo import Repo


def get_all_tasks_between(
    repo: Repo,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> dict[int, Task]:
    """Tasks with at least one log starting or ending within [start, end]."""
    now = now or utcnow()
    return {
        task_id: task
        for task_id, task in repo.list_tasks().items()
        if any(log.touches(start, end, now) for log in task.logs)
    }


def get_all_logs_between(
    repo: Repo,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> list[tuple[Task, Log]]:
    """
    Every log overlapping [start, end], sorted by start, clipped to the window.

    The returned logs are copies; stored logs are never modified. An open log
    running past ``end`` comes back closed at ``end``.
    """
    now = now or utcnow()

    pairs = []
    for task in repo.list_tasks().values():
        for log in task.logs:
            if log.overlaps(start, end, now):
                pairs.append((task, log))

    pairs.sort(key=lambda pair: pair[1].start)

    clipped = []
    for task, log in pairs:
        if log.start < start:
            log = replace(log, start=start)
        if log.effective_end(now) > end:
            log = replace(log, end=end)
        clipped.append((task, log))
    return clipped


def get_total_duration(
    repo: Repo,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> timedelta:
    """Time logged within [start, end] across all tasks."""
    now = now or utcnow()
    total = ZERO
    for task in repo.list_tasks().values():
        total += task.duration_between(start, end, now)
    return total


def find_start(tasks: Iterable[Task]) -> datetime:
    """Earliest first-log start among ``tasks``."""
    if isinstance(tasks, dict):
        tasks = tasks.values()
    starts = [task.logs[0].start for task in tasks if task.logs]
    if not starts:
        raise TaskValueError("No logs found in the given tasks.")
    return min(starts)


def find_end(tasks: Iterable[Task], now: Optional[datetime] = None) -> datetime:
    """Latest last-log end among ``tasks``; an open log ends at ``now``."""
    now = now or utcnow()
    if isinstance(tasks, dict):
        tasks = tasks.values()
    ends = [task.logs[-1].effective_end(now) for task in tasks if task.logs]
    if not ends:
        raise TaskValueError("No logs found in the given tasks.")
    return max(ends)

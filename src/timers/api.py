"""
Core API used by the CLI, reports and exports.

Every function re-reads the repository from disk. Pass ``repo`` to work on
a specific storage directory; otherwise the default one is used.

Usage:
    from timers import api

    task = api.create_log_task_at("Write report", at)
    api.stop_current_task_at(later)
"""

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from timers import query
from timers.errors import AlreadyLoggingError, StorageError, TaskValueError
from timers.models import Log, Task
from timers.repo import Repo
from timers.timeparse import format_duration

logger = logging.getLogger(__name__)

DIR_ENV_VAR = 'TIMERS_DIR'
DEFAULT_DIR = Path('~/.timers')

__all__ = [
    'DIR_ENV_VAR', 'DEFAULT_DIR', 'resolve_dir', 'get_repo',
    'create_task', 'check_log_task_at', 'log_task_at', 'create_log_task_at',
    'get_current_log_task', 'stop_current_task_at', 'get_all_tasks', 'get_all_tasks_between',
    'get_all_logs_between', 'get_total_duration', 'format_duration',
]


def resolve_dir(path=None) -> Path:
    """Storage directory: explicit path, then $TIMERS_DIR, then ~/.timers."""
    if path is None:
        path = os.environ.get(DIR_ENV_VAR) or DEFAULT_DIR
    return Path(path).expanduser()


def get_repo(path=None) -> Repo:
    """Open the repository, creating its directory on first use."""
    directory = resolve_dir(path)
    if not directory.exists():
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create task directory {directory}: {e}") from e
        logger.info(f"Created task directory {directory}")
    return Repo(directory)


def _check_not_logging(repo: Repo):
    current = repo.find_open_task()
    if current is not None:
        raise AlreadyLoggingError(current)


def create_task(name: str, repo: Optional[Repo] = None) -> Task:
    repo = repo or get_repo()
    name = (name or '').strip()
    if not name:
        raise TaskValueError("Cannot create empty task.")
    return repo.create_task(name)


def check_log_task_at(
    task_id: int,
    at: datetime,
    repo: Optional[Repo] = None,
    replace_current: bool = False,
) -> Task:
    """
    Run every check log_task_at() makes without writing anything.

    With ``replace_current`` the task being logged, if any, is taken as
    stopped at ``at`` first, so only stopping it there has to be valid.

    Raises:
        AlreadyLoggingError: if any task is logging and not being replaced
        TaskNotFoundError: if the task does not exist
        TaskValueError: if ``at`` is before the end of the task's previous log
    """
    repo = repo or get_repo()
    task = repo.get_task(task_id)
    current = repo.find_open_task()
    if current is not None:
        if not replace_current:
            raise AlreadyLoggingError(current)
        if at < current.last_log.start:
            raise TaskValueError("Cannot stop logging before the log started.")
        if current.id == task.id:
            return task

    last = task.last_log
    if last is not None and last.end is not None and at < last.end:
        raise TaskValueError("Cannot start logging before the previous log ended.")
    return task


def log_task_at(task_id: int, at: datetime, repo: Optional[Repo] = None) -> Task:
    """
    Start logging on an existing task.

    Raises:
        AlreadyLoggingError: if any task (this one included) is logging
        TaskNotFoundError: if the task does not exist
    """
    repo = repo or get_repo()
    task = check_log_task_at(task_id, at, repo=repo)
    repo.log_task(task, at)
    return task


def create_log_task_at(name: str, at: datetime, repo: Optional[Repo] = None) -> Task:
    """Create a task and start logging on it. Nothing is created on error."""
    repo = repo or get_repo()
    _check_not_logging(repo)
    task = create_task(name, repo=repo)
    repo.log_task(task, at)
    return task


def get_current_log_task(repo: Optional[Repo] = None) -> Optional[Task]:
    repo = repo or get_repo()
    return repo.find_open_task()


def stop_current_task_at(at: datetime, repo: Optional[Repo] = None) -> Task:
    repo = repo or get_repo()
    task = repo.find_open_task()
    if task is None:
        raise TaskValueError("No task currently being logged.")
    repo.stop_task(task, at)
    return task


def get_all_tasks(repo: Optional[Repo] = None, skip_corrupt: bool = False) -> dict[int, Task]:
    repo = repo or get_repo()
    return repo.list_tasks(skip_corrupt=skip_corrupt)


def get_all_tasks_between(
    start: datetime,
    end: datetime,
    repo: Optional[Repo] = None,
) -> dict[int, Task]:
    return query.get_all_tasks_between(repo or get_repo(), start, end)


def get_all_logs_between(
    start: datetime,
    end: datetime,
    repo: Optional[Repo] = None,
) -> list[tuple[Task, Log]]:
    return query.get_all_logs_between(repo or get_repo(), start, end)


def get_total_duration(
    start: datetime,
    end: datetime,
    repo: Optional[Repo] = None,
) -> timedelta:
    return query.get_total_duration(repo or get_repo(), start, end)

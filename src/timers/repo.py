"""
File-backed task repository.

One plain-text file per task, named by the decimal task ID:

    <id>
    <name>
    <start RFC3339> <end RFC3339 or empty>
    ...

A log line with an empty end field is the open log and must be last.
Nothing is cached: every call re-reads the directory.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from timers.errors import CorruptTaskError, StorageError, TaskNotFoundError, TaskValueError
from timers.models import Log, Task, format_rfc3339, parse_rfc3339

logger = logging.getLogger(__name__)


# ============================================================================
# Encoding
# ============================================================================

def _encode_time(dt: datetime, raw: Optional[str]) -> str:
    # keep foreign precision (.123, nanoseconds, Z) for untouched timestamps
    if raw is not None and parse_rfc3339(raw) == dt:
        return raw
    return format_rfc3339(dt)


def encode_task(task: Task) -> str:
    lines = [str(task.id), task.name]
    for log in task.logs:
        end = _encode_time(log.end, log._raw_end) if log.end is not None else ''
        lines.append(f"{_encode_time(log.start, log._raw_start)} {end}")
    return '\n'.join(lines) + '\n'


def decode_task(text: str, path: Path) -> Task:
    """
    Decode the contents of a task file.

    Raises:
        CorruptTaskError: on a bad ID, a bad timestamp, or an open log that
            is not the last one
    """
    lines = text.split('\n')
    if len(lines) < 2:
        raise CorruptTaskError(path, "missing name line")

    try:
        task_id = int(lines[0].strip())
    except ValueError:
        raise CorruptTaskError(path, f"invalid task id {lines[0]!r}", line_no=1)
    if task_id <= 0:
        raise CorruptTaskError(path, f"invalid task id {task_id}", line_no=1)

    name = lines[1].rstrip('\r')

    logs = []
    for line_no, line in enumerate(lines[2:], start=3):
        line = line.rstrip('\r')
        if not line.strip():
            continue

        if logs and logs[-1].end is None:
            raise CorruptTaskError(path, "open log is not the last log", line_no=line_no)

        start_str, sep, end_str = line.partition(' ')
        if not sep:
            raise CorruptTaskError(path, f"malformed log line {line!r}", line_no=line_no)
        end_str = end_str.strip()

        try:
            start = parse_rfc3339(start_str)
            end = parse_rfc3339(end_str) if end_str else None
        except ValueError as e:
            raise CorruptTaskError(path, str(e), line_no=line_no)

        logs.append(Log(start=start, end=end, _raw_start=start_str, _raw_end=end_str or None))

    return Task(id=task_id, name=name, logs=logs)


# ============================================================================
# Repository
# ============================================================================

class Repo:
    """Maps tasks to one file each under ``path``."""

    def __init__(self, path):
        self.path = Path(path)
        self.corrupt_files: list[CorruptTaskError] = []

    def __repr__(self):
        return f"Repo(path={str(self.path)!r})"

    def task_path(self, task_id: int) -> Path:
        return self.path / str(task_id)

    def _task_files(self) -> list[Path]:
        try:
            entries = list(self.path.iterdir())
        except OSError as e:
            raise StorageError(f"Cannot read task directory {self.path}: {e}") from e

        files = []
        for entry in entries:
            if not (entry.name.isascii() and entry.name.isdigit()):
                logger.debug(f"Ignoring non-task file: {entry}")
                continue
            if not entry.is_file():
                continue
            files.append(entry)
        return files

    def _read_task(self, path: Path) -> Task:
        try:
            text = path.read_text(encoding='utf-8')
        except FileNotFoundError as e:
            raise TaskNotFoundError(int(path.name), path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read task file {path}: {e}") from e
        return decode_task(text, path)

    def _write_task(self, task: Task):
        """Rewrite the whole task file (tmp file + rename)."""
        path = self.task_path(task.id)
        tmp_file = path.with_suffix('.tmp')
        try:
            tmp_file.write_text(encode_task(task), encoding='utf-8')
            os.replace(tmp_file, path)
        except OSError as e:
            raise StorageError(f"Cannot write task file {path}: {e}") from e
        logger.debug(f"Wrote task @{task.id} ({len(task.logs)} logs) to {path}")

    def list_tasks(self, skip_corrupt: bool = False) -> dict[int, Task]:
        """
        Read every task in the repository.

        Args:
            skip_corrupt: Log and skip undecodable files instead of raising.
                Skipped files are collected in ``corrupt_files``.

        Returns:
            Dict mapping task ID -> Task
        """
        self.corrupt_files = []
        tasks = {}
        for path in self._task_files():
            try:
                task = self._read_task(path)
            except CorruptTaskError as e:
                if not skip_corrupt:
                    raise
                logger.warning(f"Skipping corrupt task file: {e}")
                self.corrupt_files.append(e)
                continue
            tasks[task.id] = task
        return tasks

    def get_task(self, task_id: int) -> Task:
        return self._read_task(self.task_path(task_id))

    def next_id(self) -> int:
        # Corrupt files still reserve their ID.
        max_id = 0
        for path in self._task_files():
            max_id = max(max_id, int(path.name))
        return max_id + 1

    def create_task(self, name: str) -> Task:
        task = Task(id=self.next_id(), name=name, logs=[])
        self._write_task(task)
        logger.info(f"Created task @{task.id}: {name}")
        return task

    def log_task(self, task: Task, at: datetime):
        """
        Append an open log starting at ``at`` and persist the task.

        Does not check whether this or any other task is already logging;
        see has_any_open_log().
        """
        task.logs.append(Log(start=at, end=None))
        self._write_task(task)

    def stop_task(self, task: Task, at: datetime):
        """Close the task's last log at ``at`` and persist the task."""
        last = task.last_log
        if last is None or last.end is not None:
            raise TaskValueError("Task was not started, cannot stop logging.")
        if at < last.start:
            raise TaskValueError("Cannot stop logging before the log started.")

        last.end = at
        self._write_task(task)

    def find_open_task(self) -> Optional[Task]:
        """Return the task with an open log, lowest ID first, or None."""
        tasks = self.list_tasks()
        for task_id in sorted(tasks):
            if tasks[task_id].is_logging:
                return tasks[task_id]
        return None

    def has_any_open_log(self) -> bool:
        return self.find_open_task() is not None

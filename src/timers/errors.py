"""
Error types raised by the timers core.

Storage failures, business-rule violations and corrupt task files are kept
apart so the CLI can print a friendlier message for each kind.
"""

from pathlib import Path
from typing import Optional


class TimersError(Exception):
    """Base class for all timers errors."""


class StorageError(TimersError):
    """The storage directory or a task file could not be read or written."""


class TaskNotFoundError(StorageError):
    """No task file exists for the requested ID."""

    def __init__(self, task_id: int, path: Optional[Path] = None):
        self.task_id = task_id
        self.path = path
        super().__init__(f"Task @{task_id} not found")


class CorruptTaskError(StorageError):
    """A task file exists but cannot be decoded."""

    def __init__(self, path: Path, reason: str, line_no: Optional[int] = None):
        self.path = Path(path)
        self.reason = reason
        self.line_no = line_no
        where = f"{self.path}:{line_no}" if line_no is not None else str(self.path)
        super().__init__(f"Corrupt task file {where}: {reason}")


class TaskValueError(TimersError, ValueError):
    """A business rule was violated (e.g. stopping when nothing is logging)."""


class AlreadyLoggingError(TaskValueError):
    """Another task already has an open log."""

    def __init__(self, current):
        self.current = current
        super().__init__(f"Already logging on task @{current.id}: {current.name}")


class TimeParseError(TimersError, ValueError):
    """A time, duration or task ID argument could not be understood."""

    def __init__(self, text: str, what: str = "Time format"):
        self.text = text
        super().__init__(f"{what} '{text}' not understood")

"""
timers - track time spent on named tasks.

Tasks live one file per task in a storage directory (``~/.timers`` by
default). Each task holds an ordered list of logs; at most one log in the
whole repository is open at a time.
"""

__version__ = "0.1.0"

from timers.errors import (
    AlreadyLoggingError,
    CorruptTaskError,
    StorageError,
    TaskNotFoundError,
    TaskValueError,
    TimersError,
)
from timers.models import Log, Task, TaskStatus
from timers.repo import Repo
from timers.timeparse import format_duration, parse_duration, parse_time

__all__ = [
    "Log", "Task", "TaskStatus", "Repo",
    "TimersError", "StorageError", "TaskNotFoundError", "CorruptTaskError",
    "TaskValueError", "AlreadyLoggingError",
    "format_duration", "parse_duration", "parse_time",
    "__version__",
]

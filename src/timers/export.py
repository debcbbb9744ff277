"""
CSV export of tasks and logs.
"""

import csv
from datetime import datetime, timezone
from typing import Optional, TextIO

from timers.models import Task, format_rfc3339

TASK_HEADER = ['Task ID', 'Task name', 'Logs', 'Duration (hours)']
LOG_HEADER = ['Task ID', 'Task name', 'Begin (UTC)', 'End (UTC)', 'Duration (hours)']

# Default export range when --from/--to are not given
EXPORT_FROM = datetime(1900, 1, 1, tzinfo=timezone.utc)
EXPORT_TO = datetime(2100, 1, 1, tzinfo=timezone.utc)


def _hours(seconds: float) -> str:
    return str(int(seconds) / 3600)


def export_tasks(
    out: TextIO,
    tasks: dict[int, Task],
    objects: str = 'tasks',
    delimiter: str = ',',
    now: Optional[datetime] = None,
) -> int:
    """
    Write ``tasks`` (or their logs, if ``objects == 'logs'``) as CSV.

    Returns:
        Number of data rows written
    """
    writer = csv.writer(out, delimiter=delimiter, lineterminator='\n')
    rows = 0

    if objects == 'logs':
        writer.writerow(LOG_HEADER)
        for task_id in sorted(tasks):
            task = tasks[task_id]
            for log in task.logs:
                writer.writerow([
                    task.id,
                    task.name,
                    format_rfc3339(log.start),
                    format_rfc3339(log.end) if log.end is not None else '',
                    _hours(log.duration(now).total_seconds()),
                ])
                rows += 1
    else:
        writer.writerow(TASK_HEADER)
        for task_id in sorted(tasks):
            task = tasks[task_id]
            writer.writerow([
                task.id,
                task.name,
                len(task.logs),
                _hours(task.duration(now).total_seconds()),
            ])
            rows += 1

    return rows

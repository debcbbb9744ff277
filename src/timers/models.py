"""
Task and Log entities plus the interval arithmetic used by every report.

All datetimes are timezone-aware UTC. Functions that depend on the current
time take an optional ``now`` so callers (and tests) can pin the clock.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional


ZERO = timedelta(0)

_RFC3339_RE = re.compile(
    r'^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})'
    r'(?:\.(?P<frac>\d{1,9}))?'
    r'(?P<tz>[Zz]|[+-]\d{2}:\d{2})$'
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(dt: datetime) -> str:
    """Encode an aware datetime as an RFC3339 UTC string."""
    return dt.astimezone(timezone.utc).isoformat()


def parse_rfc3339(text: str) -> datetime:
    """
    Decode an RFC3339 timestamp into an aware UTC datetime.

    Accepts ``Z`` or ``+HH:MM`` offsets and up to nine fractional digits;
    digits past microseconds are dropped.

    Raises:
        ValueError: if the text is not an RFC3339 timestamp
    """
    match = _RFC3339_RE.match(text)
    if not match:
        raise ValueError(f"not an RFC3339 timestamp: {text!r}")

    base = match.group('base').replace('t', 'T').replace(' ', 'T')
    frac = match.group('frac')
    tz = match.group('tz')
    if tz in ('Z', 'z'):
        tz = '+00:00'

    iso = base
    if frac:
        iso += '.' + frac[:6].ljust(6, '0')
    iso += tz
    return datetime.fromisoformat(iso).astimezone(timezone.utc)


class TaskStatus(str, Enum):
    LOGGING = "logging"
    STOPPED = "stopped"


@dataclass
class Log:
    """One contiguous logging interval. ``end`` is None while it is open."""

    start: datetime
    end: Optional[datetime] = None
    # text read from disk, written back unchanged while the value is unchanged
    _raw_start: Optional[str] = field(default=None, repr=False, compare=False)
    _raw_end: Optional[str] = field(default=None, repr=False, compare=False)

    @property
    def is_open(self) -> bool:
        return self.end is None

    def effective_end(self, now: Optional[datetime] = None) -> datetime:
        if self.end is not None:
            return self.end
        return now if now is not None else utcnow()

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        return self.effective_end(now) - self.start

    def duration_between(
        self,
        start: datetime,
        end: datetime,
        now: Optional[datetime] = None,
    ) -> timedelta:
        """
        Length of the part of this log that falls within [start, end].

        Partial overlaps are floored at zero, so a log entirely before or
        after the window contributes nothing.
        """
        log_end = self.effective_end(now)

        if start <= self.start and end >= log_end:
            return log_end - self.start
        elif start > self.start and end >= log_end:
            return max(log_end - start, ZERO)
        elif start <= self.start and end < log_end:
            return max(end - self.start, ZERO)
        else:
            # log covers the whole window
            return end - start

    def overlaps(self, start: datetime, end: datetime, now: Optional[datetime] = None) -> bool:
        return self.start <= end and self.effective_end(now) >= start

    def touches(self, start: datetime, end: datetime, now: Optional[datetime] = None) -> bool:
        """True if this log starts or ends inside [start, end]."""
        log_end = self.effective_end(now)
        return start <= self.start <= end or start <= log_end <= end

    def to_dict(self) -> dict:
        return {
            'start': format_rfc3339(self.start),
            'end': format_rfc3339(self.end) if self.end is not None else None,
        }


@dataclass
class Task:
    id: int
    name: str
    logs: list[Log] = field(default_factory=list)

    def status(self) -> TaskStatus:
        for log in self.logs:
            if log.end is None:
                return TaskStatus.LOGGING
        return TaskStatus.STOPPED

    def status_text(self) -> str:
        return self.status().value

    @property
    def is_logging(self) -> bool:
        return self.status() is TaskStatus.LOGGING

    @property
    def last_log(self) -> Optional[Log]:
        return self.logs[-1] if self.logs else None

    def duration(self, now: Optional[datetime] = None) -> timedelta:
        total = ZERO
        for log in self.logs:
            total += log.duration(now)
        return total

    def duration_between(
        self,
        start: datetime,
        end: datetime,
        now: Optional[datetime] = None,
    ) -> timedelta:
        total = ZERO
        for log in self.logs:
            total += log.duration_between(start, end, now)
        return total

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status_text(),
            'duration_seconds': int(self.duration(now).total_seconds()),
            'logs': [log.to_dict() for log in self.logs],
        }

"""
Human-entered times and durations.

parse_time() understands, in order:

    y<time>                 the same time one calendar day earlier (repeatable)
    +<duration>, -<duration>  now plus/minus a duration
    HH:MM, HH:MM:SS         today, local time
    YYYY-MM-DD HH:MM[:SS]   local time

Durations are ``H:M`` or a bare number of minutes.

Parse failures return None; callers abort the current command without
touching the repository.
"""

import logging
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from timers.models import utcnow

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r'^[+-]?\d+$')

CLOCK_FORMATS = ('%H:%M', '%H:%M:%S')
DATETIME_FORMATS = ('%Y-%m-%d %H:%M', '%Y-%m-%d %H:%M:%S')


def localize(naive: datetime, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Attach a timezone to a naive wall-clock time and convert it to UTC.

    Uses the system local timezone when ``tz`` is None. Returns None when
    the wall-clock time is ambiguous or does not exist (DST fold or gap).
    """
    if tz is None:
        candidates = [naive.replace(fold=fold).astimezone() for fold in (0, 1)]
    else:
        candidates = [naive.replace(tzinfo=tz, fold=fold) for fold in (0, 1)]

    if candidates[0].utcoffset() != candidates[1].utcoffset():
        return None
    return candidates[0].astimezone(timezone.utc)


def to_local(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    return dt.astimezone(tz) if tz is not None else dt.astimezone()


def local_midnight(day: date, tz: Optional[tzinfo] = None) -> datetime:
    """Start of ``day`` in local time, as UTC."""
    naive = datetime.combine(day, time(0, 0))
    result = localize(naive, tz)
    if result is None:
        # midnight inside a DST transition: take the pre-transition offset
        aware = naive.astimezone() if tz is None else naive.replace(tzinfo=tz)
        result = aware.astimezone(timezone.utc)
    return result


def parse_duration(text: str) -> Optional[timedelta]:
    """Parse ``H:M`` (signed integers) or a bare integer number of minutes."""
    parts = text.split(':')
    if len(parts) == 2:
        hours, minutes = parts
        if _INT_RE.match(hours) and _INT_RE.match(minutes):
            return timedelta(hours=int(hours), minutes=int(minutes))
    elif len(parts) == 1 and _INT_RE.match(text):
        return timedelta(minutes=int(text))

    logger.debug(f"Duration format '{text}' not understood")
    return None


def _try_formats(text: str, formats) -> Optional[datetime]:
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_time(
    text: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> Optional[datetime]:
    """
    Parse a human-entered time into an aware UTC datetime.

    Args:
        text: The raw string
        now: Reference "now" (UTC), defaults to the current time
        tz: Timezone for wall-clock input, defaults to the system timezone

    Returns:
        The UTC datetime, or None if the text is not understood
    """
    if now is None:
        now = utcnow()

    if text.startswith('y'):
        parsed = parse_time(text[1:], now=now, tz=tz)
        if parsed is None:
            return None
        local = to_local(parsed, tz).replace(tzinfo=None)
        return localize(local - timedelta(days=1), tz)

    if text.startswith('+') or text.startswith('-'):
        delta = parse_duration(text[1:])
        if delta is None:
            logger.debug(f"Time format '{text}' not understood")
            return None
        return now + delta if text[0] == '+' else now - delta

    clock = _try_formats(text, CLOCK_FORMATS)
    if clock is not None:
        today = to_local(now, tz).date()
        return localize(datetime.combine(today, clock.time()), tz)

    full = _try_formats(text, DATETIME_FORMATS)
    if full is not None:
        result = localize(full, tz)
        if result is None:
            logger.debug(f"Time '{text}' is ambiguous or does not exist locally")
        return result

    logger.debug(f"Time format '{text}' not understood")
    return None


def format_duration(duration: timedelta) -> str:
    """
    Format a duration as ``1d 2h 3m 4s``.

    A unit is shown once the duration reaches it, so seconds always appear
    and 25 hours renders as ``1d 1h 0m 0s``. Negative durations show as 0s.
    """
    total = max(0, int(duration.total_seconds()))

    parts = []
    if total >= 86400:
        parts.append(f"{total // 86400}d")
    if total >= 3600:
        parts.append(f"{(total % 86400) // 3600}h")
    if total >= 60:
        parts.append(f"{(total % 3600) // 60}m")
    parts.append(f"{total % 60}s")
    return ' '.join(parts)

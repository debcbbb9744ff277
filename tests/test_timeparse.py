"""
Tests for time/duration parsing and duration formatting.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import at
from timers.timeparse import format_duration, local_midnight, localize, parse_duration, parse_time

UTC = timezone.utc
NOW = at(12)


def _zone(name):
    zoneinfo = pytest.importorskip('zoneinfo')
    try:
        return zoneinfo.ZoneInfo(name)
    except zoneinfo.ZoneInfoNotFoundError:
        pytest.skip(f"time zone {name} not installed")


class TestParseDuration:
    """Duration grammar."""

    @pytest.mark.parametrize('text,expected', [
        ('90', timedelta(minutes=90)),
        ('0', timedelta(0)),
        ('1:30', timedelta(hours=1, minutes=30)),
        ('0:05', timedelta(minutes=5)),
        ('-1:00', timedelta(hours=-1)),
        ('2:-30', timedelta(hours=1, minutes=30)),
    ])
    def test_valid(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize('text', ['', 'abc', '1:xx', '1:2:3', '1.5', ':30'])
    def test_invalid(self, text):
        assert parse_duration(text) is None


class TestParseTime:
    """parse_time rules, with the clock and timezone pinned."""

    def test_clock_time_today(self):
        assert parse_time('09:30', now=NOW, tz=UTC) == at(9, 30)

    def test_clock_time_with_seconds(self):
        assert parse_time('09:30:15', now=NOW, tz=UTC) == at(9, 30, 15)

    def test_clock_time_local_offset(self):
        plus_two = timezone(timedelta(hours=2))
        assert parse_time('09:30', now=NOW, tz=plus_two) == at(7, 30)

    def test_full_datetime(self):
        assert parse_time('2024-01-10 08:00', now=NOW, tz=UTC) == at(8, day=10)
        assert parse_time('2024-01-10 08:00:05', now=NOW, tz=UTC) == at(8, 0, 5, day=10)

    def test_relative_plus(self):
        assert parse_time('+1:30', now=NOW, tz=UTC) == at(13, 30)

    def test_relative_minus_minutes(self):
        assert parse_time('-90', now=NOW, tz=UTC) == at(10, 30)

    def test_yesterday(self):
        assert parse_time('y09:00', now=NOW, tz=UTC) == at(9, day=14)

    def test_day_before_yesterday(self):
        assert parse_time('yy09:00', now=NOW, tz=UTC) == at(9, day=13)

    def test_yesterday_relative(self):
        assert parse_time('y-1:00', now=NOW, tz=UTC) == at(11, day=14)

    @pytest.mark.parametrize('text', ['', 'y', 'yabc', 'now', '25:00', '2024-01-10', '+abc', 'tomorrow'])
    def test_invalid(self, text):
        assert parse_time(text, now=NOW, tz=UTC) is None

    def test_default_now(self):
        parsed = parse_time('+0:00')
        assert abs(parsed - datetime.now(UTC)) < timedelta(seconds=5)

    def test_result_is_utc(self):
        parsed = parse_time('09:30', now=NOW, tz=timezone(timedelta(hours=-5)))
        assert parsed.utcoffset() == timedelta(0)


class TestDaylightSaving:
    """Wall-clock times in a DST fold or gap are rejected."""

    def test_nonexistent_time(self):
        rome = _zone('Europe/Rome')
        assert parse_time('2024-03-31 02:30', now=NOW, tz=rome) is None

    def test_ambiguous_time(self):
        rome = _zone('Europe/Rome')
        assert parse_time('2024-10-27 02:30', now=NOW, tz=rome) is None

    def test_after_transition(self):
        rome = _zone('Europe/Rome')
        expected = datetime(2024, 10, 27, 3, 0, tzinfo=UTC)
        assert parse_time('2024-10-27 04:00', now=NOW, tz=rome) == expected

    def test_localize_regular_time(self):
        rome = _zone('Europe/Rome')
        assert localize(datetime(2024, 1, 15, 10, 0), rome) == at(9)

    def test_local_midnight(self):
        assert local_midnight(date(2024, 1, 15), UTC) == at(0)


class TestFormatDuration:
    """Human-readable durations."""

    @pytest.mark.parametrize('seconds,expected', [
        (0, '0s'),
        (5, '5s'),
        (60, '1m 0s'),
        (61, '1m 1s'),
        (3600, '1h 0m 0s'),
        (90 * 60 + 5, '1h 30m 5s'),
        (86400, '1d 0h 0m 0s'),
        (25 * 3600, '1d 1h 0m 0s'),
        (3 * 86400 + 4 * 3600 + 5 * 60 + 6, '3d 4h 5m 6s'),
    ])
    def test_format(self, seconds, expected):
        assert format_duration(timedelta(seconds=seconds)) == expected

    def test_negative_is_zero(self):
        assert format_duration(timedelta(seconds=-30)) == '0s'

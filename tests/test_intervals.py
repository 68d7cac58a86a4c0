"""Tests for core interval logic."""

from datetime import datetime

import pytest

from ttjr.core.errors import InvalidOptionError
from ttjr.core.intervals import (
    HourMinute,
    Interval,
    clamp_end,
    format_hhmm,
    next_end_of_day,
)


def local_ts(day: int, hour: int, minute: int = 0) -> int:
    """Unix timestamp for a local wall-clock time in January 2025."""
    return int(datetime(2025, 1, day, hour, minute).timestamp())


class TestInterval:
    def test_open_interval(self):
        interval = Interval(id=1, category="work", start_time=100)
        assert interval.is_open is True
        assert interval.duration() == 0

    def test_closed_duration(self):
        interval = Interval(id=1, category="work", start_time=100, end_time=3700)
        assert interval.is_open is False
        assert interval.duration() == 3600

    def test_inverted_range_counts_as_zero(self):
        interval = Interval(id=1, category="work", start_time=500, end_time=100)
        assert interval.duration() == 0

    def test_to_dict_field_order(self):
        interval = Interval(id=3, category="work", start_time=1, end_time=None)
        assert list(interval.to_dict()) == ["id", "category", "start_time", "end_time"]
        assert interval.to_dict()["end_time"] is None


class TestHourMinute:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("17:00", HourMinute(17, 0)),
            ("8:00", HourMinute(8, 0)),
            ("09:15", HourMinute(9, 15)),
            (" 23:59 ", HourMinute(23, 59)),
        ],
    )
    def test_parse_valid(self, value, expected):
        assert HourMinute.parse(value) == expected

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "1700", "", "17:00:00"])
    def test_parse_invalid(self, value):
        with pytest.raises(InvalidOptionError):
            HourMinute.parse(value)

    def test_str_is_zero_padded(self):
        assert str(HourMinute(8, 5)) == "08:05"


class TestEndOfDay:
    def test_boundary_later_same_day(self):
        eod = HourMinute(17, 0)
        assert next_end_of_day(local_ts(15, 9), eod) == local_ts(15, 17)

    def test_boundary_next_day_when_started_after_it(self):
        eod = HourMinute(17, 0)
        assert next_end_of_day(local_ts(15, 18), eod) == local_ts(16, 17)

    def test_started_exactly_at_boundary_uses_next_day(self):
        eod = HourMinute(17, 0)
        assert next_end_of_day(local_ts(15, 17), eod) == local_ts(16, 17)


class TestClampEnd:
    def test_no_end_of_day_closes_at_now(self):
        assert clamp_end(local_ts(15, 9), local_ts(15, 20)) == local_ts(15, 20)

    def test_clamps_forgotten_stop(self):
        """Opened at 09:00, stopped at 20:00 the same day -> 17:00."""
        eod = HourMinute(17, 0)
        assert clamp_end(local_ts(15, 9), local_ts(15, 20), eod) == local_ts(15, 17)

    def test_stop_before_end_of_day_is_untouched(self):
        eod = HourMinute(17, 0)
        assert clamp_end(local_ts(15, 9), local_ts(15, 12), eod) == local_ts(15, 12)

    def test_multi_day_clamps_to_first_boundary(self):
        eod = HourMinute(17, 0)
        assert clamp_end(local_ts(15, 9), local_ts(18, 10), eod) == local_ts(15, 17)

    def test_evening_start_stopped_next_morning(self):
        eod = HourMinute(17, 0)
        assert clamp_end(local_ts(15, 18), local_ts(16, 10), eod) == local_ts(16, 10)


class TestFormatHhmm:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (0, "00:00"),
            (59, "00:00"),
            (3599, "00:59"),
            (10800, "03:00"),
            (3600 * 125 + 60 * 7 + 30, "125:07"),
            (-10, "00:00"),
        ],
    )
    def test_truncates(self, seconds, expected):
        assert format_hhmm(seconds) == expected

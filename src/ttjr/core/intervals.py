"""Pure interval domain logic - no I/O dependencies."""

import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta

from .errors import InvalidOptionError

END_OF_DAY = "end-of-day"

_HOUR_MINUTE_PATTERN = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{1,2})$")


@dataclass
class Interval:
    """A logged activity span. ``end_time`` is None while the interval is open."""

    id: int
    category: str
    start_time: int
    end_time: int | None = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def duration(self) -> int:
        """Closed duration in seconds; open and inverted intervals count as zero."""
        if self.end_time is None:
            return 0
        return max(0, self.end_time - self.start_time)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }


@dataclass(frozen=True)
class HourMinute:
    """A local time-of-day such as the configured end of the working day."""

    hour: int
    minute: int

    @classmethod
    def parse(cls, value: str) -> "HourMinute":
        """Parse a 24-hour ``HH:MM`` string (``8:00``, ``17:30``)."""
        match = _HOUR_MINUTE_PATTERN.match(value.strip())
        if not match:
            raise InvalidOptionError(
                "Time must be a 24-hour time formatted like HH:MM (i.e. 10:30, 09:15, 8:00, etc)"
            )
        hour = int(match.group("hour"))
        minute = int(match.group("minute"))
        if hour > 23:
            raise InvalidOptionError(f"Got hour={hour}, but hour must be 0-23")
        if minute > 59:
            raise InvalidOptionError(f"Got minute={minute}, but minute must be 0-59")
        return cls(hour, minute)

    def as_time(self) -> time:
        return time(self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def next_end_of_day(start_time: int, end_of_day: HourMinute) -> int:
    """First occurrence of ``end_of_day`` (local time) strictly after ``start_time``."""
    start = datetime.fromtimestamp(start_time)
    boundary = datetime.combine(start.date(), end_of_day.as_time())
    if boundary <= start:
        boundary = datetime.combine(start.date() + timedelta(days=1), end_of_day.as_time())
    return int(boundary.timestamp())


def clamp_end(start_time: int, now: int, end_of_day: HourMinute | None = None) -> int:
    """
    Resolve the end time for closing an interval at ``now``.

    Without an end of day the interval closes at ``now``. Otherwise it closes
    at whichever comes first: ``now`` or the first end-of-day boundary after
    the interval started. An interval left open over several days is clamped
    to the first boundary only.
    """
    if end_of_day is None:
        return now
    return min(now, next_end_of_day(start_time, end_of_day))


def format_hhmm(seconds: int) -> str:
    """Format a duration as ``HH:MM`` using integer division (no rounding)."""
    seconds = max(0, seconds)
    return f"{seconds // 3600:02d}:{seconds // 60 % 60:02d}"

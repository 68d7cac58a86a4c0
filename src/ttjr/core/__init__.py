"""Functional core - pure business logic with no I/O."""

from .errors import (
    DateParseError,
    DuplicateError,
    ExportIOError,
    InvalidOptionError,
    InvalidRangeError,
    NotFoundError,
    StorageError,
    TimetrackError,
    UnknownCategoryError,
)
from .intervals import END_OF_DAY, HourMinute, Interval, clamp_end, format_hhmm, next_end_of_day
from .summary import CategorySummary, Summary, summarize

__all__ = [
    # Errors
    "TimetrackError",
    "UnknownCategoryError",
    "DuplicateError",
    "NotFoundError",
    "DateParseError",
    "StorageError",
    "ExportIOError",
    "InvalidOptionError",
    "InvalidRangeError",
    # Intervals
    "END_OF_DAY",
    "Interval",
    "HourMinute",
    "clamp_end",
    "next_end_of_day",
    "format_hhmm",
    # Summary
    "CategorySummary",
    "Summary",
    "summarize",
]

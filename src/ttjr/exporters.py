"""Render logged intervals as summary text, CSV, JSON or iCalendar.

Every renderer is a pure function of its input: the same intervals always
produce the same text.
"""

import csv
import io
import json
from datetime import datetime, timezone
from email.utils import format_datetime
from enum import Enum
from typing import Iterable

from .core.intervals import Interval, format_hhmm
from .core.summary import Summary, summarize

CSV_COLUMNS = ["id", "category", "start_time", "end_time"]
ICAL_PRODID = "-//ttjr//Time Tracking//EN"
_ICAL_LINE_LIMIT = 75


class ExportFormat(str, Enum):
    """Supported export formats."""

    JSON = "json"
    CSV = "csv"
    ICAL = "ical"
    SUMMARY = "summary"


def _local_rfc2822(tstamp: int) -> str:
    return format_datetime(datetime.fromtimestamp(tstamp).astimezone())


def _utc_stamp(tstamp: int) -> str:
    return datetime.fromtimestamp(tstamp, timezone.utc).strftime("%Y%m%dT%H%M%SZ")


# ============== Summary ==============


def summary_header(start: int | None = None, end: int | None = None) -> str:
    """Describe the time window a summary covers."""
    if start is None and end is None:
        return "Tabulating results for all time"
    if end is None:
        return f"Tabulating results starting on/after {_local_rfc2822(start)}"
    if start is None:
        return f"Tabulating results through {_local_rfc2822(end)}"
    return (
        f"Tabulating results starting on/after {_local_rfc2822(start)}"
        f" through {_local_rfc2822(end)}"
    )


def render_summary(summary: Summary, start: int | None = None, end: int | None = None) -> str:
    """
    Human-readable report of aggregated totals.

    Example:
        Tabulating results for all time
        Logged 2 activities for a total of 03:00
        writing:
          1 logs, 01:00 cumulative, 33.33% of total
    """
    lines = [
        summary_header(start, end),
        f"Logged {summary.total_count} activities for a total of {format_hhmm(summary.total_duration)}",
    ]
    for item in summary.categories:
        lines.append(f"{item.category}:")
        lines.append(
            f"  {item.count} logs, {format_hhmm(item.duration)} cumulative, "
            f"{item.percentage:.2f}% of total"
        )
    return "\n".join(lines) + "\n"


# ============== JSON / CSV ==============


def render_json(intervals: Iterable[Interval]) -> str:
    """JSON array of ``{id, category, start_time, end_time}`` objects."""
    return json.dumps([i.to_dict() for i in intervals], indent=2) + "\n"


def render_csv(intervals: Iterable[Interval]) -> str:
    """CSV with a header row; open intervals leave ``end_time`` empty."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_COLUMNS)
    for interval in intervals:
        writer.writerow(
            [
                interval.id,
                interval.category,
                interval.start_time,
                "" if interval.is_open else interval.end_time,
            ]
        )
    return buffer.getvalue()


# ============== iCalendar ==============


def escape_ical_text(text: str) -> str:
    """Escape a TEXT value per RFC 5545 section 3.3.11."""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace("\r", "\\n")
    )


def fold_ical_line(line: str) -> str:
    """Fold a content line into chunks of at most 75 octets."""
    encoded = line.encode("utf-8")
    if len(encoded) <= _ICAL_LINE_LIMIT:
        return line

    parts = []
    current = ""
    limit = _ICAL_LINE_LIMIT
    for char in line:
        if len((current + char).encode("utf-8")) > limit:
            parts.append(current)
            current = ""
            # continuation lines start with a space
            limit = _ICAL_LINE_LIMIT - 1
        current += char
    parts.append(current)
    return "\r\n ".join(parts)


def render_ical(intervals: Iterable[Interval]) -> str:
    """
    iCalendar document with one event per closed interval.

    Open intervals are skipped since an event needs an end. Timestamps are
    taken from the intervals only, so re-rendering unchanged data yields
    byte-identical output.
    """
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICAL_PRODID}",
        "CALSCALE:GREGORIAN",
    ]
    for interval in intervals:
        if interval.is_open:
            continue
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{interval.id}@ttjr",
                f"DTSTAMP:{_utc_stamp(interval.start_time)}",
                f"DTSTART:{_utc_stamp(interval.start_time)}",
                f"DTEND:{_utc_stamp(interval.end_time)}",
                f"SUMMARY:{escape_ical_text(interval.category)}",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return "".join(fold_ical_line(line) + "\r\n" for line in lines)


def render_export(
    export_format: ExportFormat,
    intervals: Iterable[Interval],
    start: int | None = None,
    end: int | None = None,
) -> str:
    """Render intervals in the requested format."""
    export_format = ExportFormat(export_format)
    match export_format:
        case ExportFormat.JSON:
            return render_json(intervals)
        case ExportFormat.CSV:
            return render_csv(intervals)
        case ExportFormat.ICAL:
            return render_ical(intervals)
        case ExportFormat.SUMMARY:
            return render_summary(summarize(intervals), start, end)

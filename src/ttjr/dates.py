"""Human-readable date parsing for command-line arguments."""

import re
from datetime import datetime, timedelta

from dateutil import parser as dtparser
from dateutil.relativedelta import relativedelta

from .core.errors import DateParseError

_RELATIVE_PATTERN = re.compile(
    r"^(?P<sign>[+-])?\s*(?P<amount>\d+)\s*(?P<unit>[a-z]+)(?P<ago>\s+ago)?$",
    re.IGNORECASE,
)

_UNITS = {
    "s": "seconds", "sec": "seconds", "secs": "seconds", "second": "seconds", "seconds": "seconds",
    "m": "minutes", "min": "minutes", "mins": "minutes", "minute": "minutes", "minutes": "minutes",
    "h": "hours", "hr": "hours", "hrs": "hours", "hour": "hours", "hours": "hours",
    "d": "days", "day": "days", "days": "days",
    "w": "weeks", "week": "weeks", "weeks": "weeks",
    "month": "months", "months": "months",
    "y": "years", "year": "years", "years": "years",
}


def _parse_relative(text: str, now: datetime) -> datetime | None:
    match = _RELATIVE_PATTERN.match(text)
    if not match:
        return None
    unit = _UNITS.get(match.group("unit").lower())
    if unit is None:
        return None
    amount = int(match.group("amount"))
    if match.group("sign") == "-" or match.group("ago"):
        amount = -amount
    return now + relativedelta(**{unit: amount})


def parse_human_date(text: str, now: int | None = None) -> int:
    """
    Parse a date string into a Unix timestamp.

    Accepts absolute dates and times understood by dateutil (naive values are
    local time, missing parts default to ``now``), offsets such as ``-2 days``,
    ``3 hours ago`` or ``+30m``, and the words now/today/yesterday/tomorrow.

    Raises:
        DateParseError: If the string is not understood.
    """
    reference = datetime.fromtimestamp(now) if now is not None else datetime.now()
    cleaned = text.strip()
    lowered = cleaned.lower()
    midnight = reference.replace(hour=0, minute=0, second=0, microsecond=0)

    if lowered == "now":
        parsed = reference
    elif lowered == "today":
        parsed = midnight
    elif lowered == "yesterday":
        parsed = midnight - timedelta(days=1)
    elif lowered == "tomorrow":
        parsed = midnight + timedelta(days=1)
    else:
        parsed = _parse_relative(cleaned, reference)

    if parsed is None:
        try:
            parsed = dtparser.parse(cleaned, default=reference.replace(microsecond=0))
        except (ValueError, OverflowError) as e:
            raise DateParseError(f"Unable to parse date '{text}'") from e

    return int(parsed.timestamp())

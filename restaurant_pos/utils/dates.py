# restaurant_pos/utils/dates.py
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Naive UTC "now"; every timestamp column stores UTC without tzinfo
def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_day(value: str) -> datetime:
    if not value or not _DAY_RE.match(value):
        raise ValueError("A valid date in YYYY-MM-DD format is required.")
    return datetime.strptime(value, "%Y-%m-%d")


def local_day_range(day: str, timezone_offset: Optional[int] = None) -> Tuple[datetime, datetime]:
    """Return the half-open UTC range ``[start, end)`` covering one local day.

    ``timezone_offset`` follows the browser convention of
    ``Date.getTimezoneOffset()``: minutes to add to local time to get UTC,
    positive for zones behind UTC (300 for UTC-5) and negative for zones
    ahead of it (-120 for UTC+2). Without an offset the UTC day is used.
    """
    start = parse_day(day)
    if timezone_offset:
        start += timedelta(minutes=timezone_offset)
    return start, start + timedelta(days=1)


def local_today(timezone_offset: Optional[int] = None) -> str:
    now = utcnow()
    if timezone_offset:
        now -= timedelta(minutes=timezone_offset)
    return now.strftime("%Y-%m-%d")

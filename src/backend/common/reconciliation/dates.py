from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

RANGE_SEPARATOR = " - "


def parse_day(value: Optional[str]) -> Optional[date]:
    """Parse a strict `YYYY-MM-DD` string; anything else yields None."""
    if value is None:
        return None
    text = str(value).strip()
    if len(text) != 10:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_date_range(value: Optional[str]) -> Optional[tuple[datetime, datetime]]:
    """
    Parse a competition date field into an inclusive day-granularity range.

    Accepts `YYYY-MM-DD` or `YYYY-MM-DD - YYYY-MM-DD`. The range runs from the start
    day at 00:00:00 to the end day at 23:59:59.999999. Returns None for anything
    unparseable, including ranges whose end precedes their start.
    """
    if not value or not isinstance(value, str):
        return None
    parts = value.strip().split(RANGE_SEPARATOR)
    if len(parts) == 1:
        start_day = end_day = parse_day(parts[0])
    elif len(parts) == 2:
        start_day, end_day = parse_day(parts[0]), parse_day(parts[1])
    else:
        return None
    if start_day is None or end_day is None or end_day < start_day:
        return None
    return datetime.combine(start_day, time.min), datetime.combine(end_day, time.max)


def range_contains(start: datetime, end: datetime, day: date) -> bool:
    moment = datetime.combine(day, time.min)
    return start <= moment <= end

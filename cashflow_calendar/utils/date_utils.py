"""Date manipulation utilities"""

import calendar
import logging
from datetime import date, datetime, timedelta, timezone as dt_timezone
from typing import List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, using the last day of the month when `day` overflows it (Feb 31 -> Feb 28/29)"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def parse_calendar_date(value: Union[date, str]) -> date:
    """
    Parse a calendar day from a `YYYY-MM-DD` string or a date.

    A datetime is reduced to its date; a timestamp string keeps only its date part.

    Raises:
        ValueError: Empty or malformed value
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Date is required")

    text = value.strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return date.fromisoformat(text)


def resolve_today(timezone: Optional[str] = None, now: Optional[datetime] = None) -> date:
    """
    Resolve the calendar day it currently is in the given IANA timezone.

    Unknown or empty timezone names fall back to UTC. `now` must be timezone-aware when given.
    """
    now = now or datetime.now(dt_timezone.utc)
    if not timezone:
        return now.astimezone(dt_timezone.utc).date()

    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("Unknown timezone, falling back to UTC", extra={"timezone": timezone})
        return now.astimezone(dt_timezone.utc).date()

    return now.astimezone(zone).date()


def format_short_date(value: date) -> str:
    """Short display label, e.g. 'Mar 3'"""
    return f"{value:%b} {value.day}"

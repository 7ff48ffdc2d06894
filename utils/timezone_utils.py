"""
Date and time helpers for calendar normalization and release timestamps.
"""

import re
from datetime import datetime
from typing import Optional, Tuple

import pytz
from dateutil import parser


_OFFSET_SUFFIX = re.compile(r"[+-]\d{2}:\d{2}$")


def parse_iso_datetime(iso_str: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken as UTC. Returns None when the value is
    missing or unparseable.
    """
    if not iso_str:
        return None
    try:
        dt = parser.isoparse(iso_str)
    except (ValueError, TypeError, OverflowError):
        return None
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)


def split_utc(iso_str: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a timestamp into UTC ``(YYYY-MM-DD, HH:MM:SS)``.

    Returns ``(None, None)`` if the value cannot be parsed.
    """
    dt = parse_iso_datetime(iso_str)
    if dt is None:
        return (None, None)
    return (dt.strftime("%Y-%m-%d"), dt.strftime("%H:%M:%S"))


def format_release_date(date: Optional[str], time: Optional[str], fallback_year: int) -> str:
    """
    Build a release timestamp from nullable date and time fields.

    - no date: ``<year>-01-01T00:00:00Z``
    - date only: midnight UTC on that date
    - date and time: UTC unless the time carries a numeric offset,
      which is kept as-is
    """
    if not date:
        return f"{fallback_year}-01-01T00:00:00Z"

    if time:
        clean_time = time[:-1] if time.endswith("Z") else time
        if _OFFSET_SUFFIX.search(clean_time):
            return f"{date}T{clean_time}"
        return f"{date}T{clean_time}Z"

    return f"{date}T00:00:00Z"


def sort_key(date: Optional[str], time: Optional[str]) -> datetime:
    """Chronological sort key; unknown dates sort last."""
    if not date:
        return datetime.max.replace(tzinfo=pytz.UTC)
    dt = parse_iso_datetime(format_release_date(date, time, 0))
    return dt or datetime.max.replace(tzinfo=pytz.UTC)

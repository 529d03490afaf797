"""Business-calendar date helpers: today, week keys, loose date parsing."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo

from uid_ops.config import BUSINESS_TIMEZONE

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SLASH_DATE = re.compile(r"^(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})$")

# Day zero of the spreadsheet serial-date system (1900 leap-year bug included)
_EXCEL_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return to_utc_iso(datetime.now(timezone.utc))


def to_utc_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def business_today(now: datetime | None = None, tz_name: str | None = None) -> str:
    """Return today's date (YYYY-MM-DD) in the business time zone."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(ZoneInfo(tz_name or BUSINESS_TIMEZONE)).date().isoformat()


def _build_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def to_iso_date(value: Any) -> str:
    """Coerce a loosely formatted date to YYYY-MM-DD; return "" when it cannot be read.

    Accepts spreadsheet serial numbers, ISO dates and datetimes, M/D/Y and
    D/M/Y (slash or dash separated, two- or four-digit year).
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)):
        try:
            return (_EXCEL_EPOCH + timedelta(days=float(value))).date().isoformat()
        except (OverflowError, ValueError):
            return ""
    s = str(value).strip()
    if not s:
        return ""
    if _ISO_DATE.match(s):
        return s if _build_date(int(s[:4]), int(s[5:7]), int(s[8:10])) else ""
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    m = _SLASH_DATE.match(s)
    if m:
        first, second = int(m.group(1)), int(m.group(2))
        year = int(m.group(3))
        if len(m.group(3)) == 2:
            year += 2000
        parsed = _build_date(year, first, second) or _build_date(year, second, first)
        if parsed:
            return parsed.isoformat()
    return ""


def monday_of(value: Any) -> str:
    """Return the Monday (YYYY-MM-DD) of the week containing ``value``, or "" if unreadable."""
    iso = to_iso_date(value)
    if not iso:
        return ""
    d = date.fromisoformat(iso)
    return (d - timedelta(days=d.weekday())).isoformat()

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import Tuple
from zoneinfo import ZoneInfo

from attendance_api.core.config import settings


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_zone() -> ZoneInfo:
    """Server-local timezone used to decide what "today" means."""
    return _zone(settings.TIMEZONE)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime is timezone-aware (UTC)."""
    if dt is None:
        return None
    if dt.tzinfo is None:  # naive → assume UTC
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_date(dt: datetime | None = None) -> date:
    """Calendar date of `dt` (default now) in the server-local timezone."""
    dt = ensure_utc(dt) or now_utc()
    return dt.astimezone(local_zone()).date()


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """UTC [start, end) covering one server-local calendar day."""
    zone = local_zone()
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def range_bounds(start_day: date, end_day: date) -> Tuple[datetime, datetime]:
    """UTC [start, end) covering an inclusive range of local calendar days."""
    start, _ = day_bounds(start_day)
    _, end = day_bounds(end_day)
    return start, end


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month."""
    first = date(year, month, 1)
    if month == 12:
        next_first = date(year + 1, 1, 1)
    else:
        next_first = date(year, month + 1, 1)
    return first, next_first - timedelta(days=1)


def business_days(start_day: date, end_day: date) -> int:
    """Count Monday-Friday days in the inclusive range."""
    if end_day < start_day:
        return 0
    count = 0
    current = start_day
    while current <= end_day:
        if current.weekday() < 5:
            count += 1
        current += timedelta(days=1)
    return count


def format_timestamp(dt: datetime | None) -> str | None:
    """ISO-8601 with offset, rendered in the server-local timezone."""
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return dt.astimezone(local_zone()).isoformat()

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

import pytz

from ..core.config import settings


def facility_tz(name: Optional[str] = None) -> pytz.BaseTzInfo:
    return pytz.timezone(name or settings.facility_timezone)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_hour_aligned(value: datetime) -> bool:
    return value.minute == 0 and value.second == 0 and value.microsecond == 0


def facility_day_bounds(day: date, tz_name: Optional[str] = None) -> tuple[datetime, datetime]:
    """
    UTC [start, end) of a calendar day in the facility's timezone.

    DST transition days are 23 or 25 hours long, so the end is localized
    separately rather than computed as start + 24h.
    """
    tz = facility_tz(tz_name)
    start_local = tz.localize(datetime.combine(day, time.min))
    end_local = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)


def to_facility_time(value: datetime, tz_name: Optional[str] = None) -> datetime:
    return ensure_utc(value).astimezone(facility_tz(tz_name))

# backend/tests/unit/core/test_time_utils.py
from datetime import date, datetime, timedelta, timezone

from simbay.utils.time_utils import ensure_utc, facility_day_bounds, is_hour_aligned


def test_summer_day_in_denver():
    start, end = facility_day_bounds(date(2031, 6, 2), "America/Denver")

    assert start == datetime(2031, 6, 2, 6, 0, tzinfo=timezone.utc)
    assert end == datetime(2031, 6, 3, 6, 0, tzinfo=timezone.utc)


def test_dst_start_day_is_23_hours():
    start, end = facility_day_bounds(date(2031, 3, 9), "America/Denver")

    assert end - start == timedelta(hours=23)


def test_ensure_utc_and_alignment():
    naive = datetime(2031, 6, 2, 16, 0)

    assert ensure_utc(naive).tzinfo == timezone.utc
    assert is_hour_aligned(naive)
    assert not is_hour_aligned(naive.replace(minute=30))

from datetime import date, datetime

import pytest

from clock import (
    MonthKey,
    SystemClock,
    clamp_day,
    days_between,
    days_in_month,
    days_remaining_in_month,
)


def test_days_in_month_handles_leap_years_and_december():
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert days_in_month(2024, 4) == 30
    assert days_in_month(2024, 12) == 31


def test_clamp_day_snaps_to_month_end():
    assert clamp_day(2023, 2, 31) == date(2023, 2, 28)
    assert clamp_day(2024, 2, 31) == date(2024, 2, 29)
    assert clamp_day(2024, 4, 31) == date(2024, 4, 30)
    assert clamp_day(2024, 1, 15) == date(2024, 1, 15)


def test_month_key_boundaries_and_order():
    month = MonthKey(2024, 12)
    assert month.start == date(2024, 12, 1)
    assert month.end == date(2024, 12, 31)
    assert month.next() == MonthKey(2025, 1)
    assert MonthKey(2024, 1) < MonthKey(2024, 2) < MonthKey(2025, 1)
    assert str(MonthKey(2024, 3)) == "2024-03"


def test_month_key_parse_accepts_dates_and_timestamps():
    assert MonthKey.parse("2024-02") == MonthKey(2024, 2)
    assert MonthKey.parse("2024-02-17") == MonthKey(2024, 2)
    assert MonthKey.parse("2024-02-17T10:31:00.000Z") == MonthKey(2024, 2)
    assert MonthKey.of(datetime(2024, 5, 31, 23, 59)) == MonthKey(2024, 5)


@pytest.mark.parametrize("raw", ["", "garbage", "2024-13"])
def test_month_key_parse_rejects_bad_markers(raw):
    with pytest.raises(ValueError):
        MonthKey.parse(raw)


def test_days_remaining_counts_today():
    assert days_remaining_in_month(date(2024, 2, 29)) == 1
    assert days_remaining_in_month(date(2024, 2, 1)) == 29
    assert days_between(date(2024, 1, 30), date(2024, 2, 2)) == 3


def test_system_clock_uses_configured_zone():
    clock = SystemClock("UTC")
    assert clock.now().tzinfo is not None
    assert isinstance(clock.today(), date)

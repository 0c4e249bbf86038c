from datetime import date, datetime, timezone, timedelta

import pytest

from calendar_engine.services import date_utils as du


@pytest.mark.parametrize("value", [
    "2024-06-10",
    "2024-06-10T09:30:00",
    "2024-06-10T09:30:00Z",
    "June 10, 2024",
    date(2024, 6, 10),
    datetime(2024, 6, 10, 9, 30),
    1718011800000,  # epoch milliseconds
])
def test_is_valid_date_accepts_common_shapes(value):
    assert du.is_valid_date(value)


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", "2024-13-45", True, object(), float("nan")])
def test_is_valid_date_rejects_garbage(value):
    assert not du.is_valid_date(value)


def test_aware_values_are_converted_to_naive_utc():
    parsed = du.parse_datetime("2024-06-10T09:00:00+02:00")
    assert parsed == datetime(2024, 6, 10, 7, 0)
    assert parsed.tzinfo is None

    aware = datetime(2024, 6, 10, 9, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert du.parse_datetime(aware) == datetime(2024, 6, 10, 14, 0)


def test_days_between_truncates_to_midnight_and_is_absolute():
    assert du.days_between("2024-06-10T23:59", "2024-06-11T00:01") == 1
    assert du.days_between("2024-06-11T08:00", "2024-06-10T20:00") == 1
    assert du.days_between("2024-06-10T01:00", "2024-06-10T23:00") == 0
    assert du.days_between("2024-02-28", "2024-03-01") == 2  # leap year


def test_days_between_invalid_returns_zero():
    assert du.days_between("garbage", "2024-06-10") == 0
    assert du.days_between(None, None) == 0


def test_signed_days_between():
    assert du.signed_days_between("2024-06-10T18:00", "2024-06-08T09:00") == -2
    assert du.signed_days_between("2024-06-10", "2024-06-12") == 2
    assert du.signed_days_between("nope", "2024-06-12") is None


def test_add_days_weeks_months():
    assert du.add_days("2024-06-10T09:00", 3) == datetime(2024, 6, 13, 9, 0)
    assert du.add_weeks("2024-06-10", -1) == datetime(2024, 6, 3)
    assert du.add_months("2024-01-31", 1) == datetime(2024, 2, 29)
    assert du.add_months("2024-12-15", 1) == datetime(2025, 1, 15)
    assert du.add_days("bad", 1) is None


def test_start_and_end_of_week_monday_based():
    # Sunday belongs to the week that started the previous Monday
    assert du.start_of_week("2024-06-16T15:00") == datetime(2024, 6, 10)
    assert du.start_of_week("2024-06-10") == datetime(2024, 6, 10)
    end = du.end_of_week("2024-06-12")
    assert end.date() == date(2024, 6, 16)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_start_of_week_custom_start_day():
    import calendar
    assert du.start_of_week("2024-06-12", week_start=calendar.SUNDAY) == datetime(2024, 6, 9)


@pytest.mark.parametrize("value,week,year", [
    ("2021-01-01", 53, 2020),
    ("2024-12-31", 1, 2025),
    ("2024-06-10", 24, 2024),
    ("2026-01-01", 1, 2026),
    ("2027-01-03", 53, 2026),
])
def test_iso_week_fixtures(value, week, year):
    assert du.iso_week_number(value) == week
    assert du.iso_week_year(value) == year


def test_iso_week_invalid_is_zero():
    assert du.iso_week_number("nope") == 0
    assert du.iso_week_year("nope") == 0


def test_is_this_week_and_next_week():
    now = datetime(2024, 6, 10, 12, 0)  # Monday, ISO week 24
    assert du.is_this_week("2024-06-16", now)
    assert not du.is_this_week("2024-06-17", now)
    assert du.is_next_week("2024-06-17", now)
    assert du.is_next_week("2024-06-23", now)
    assert not du.is_next_week("2024-06-24", now)
    assert not du.is_next_week("garbage", now)


def test_is_next_week_across_year_boundary():
    # 2024-12-23 is in week 52 (the last week of ISO year 2024)
    now = datetime(2024, 12, 23)
    assert du.is_next_week("2024-12-30", now)  # week 1 of ISO year 2025
    # 2020 has 53 ISO weeks: week 52 is followed by week 53, not week 1
    now = datetime(2020, 12, 21)
    assert du.is_next_week("2020-12-28", now)
    assert not du.is_next_week("2021-01-04", now)
    # and week 53 rolls over to week 1 of the next ISO year
    assert du.is_next_week("2021-01-04", datetime(2020, 12, 31))


def test_day_predicates():
    now = datetime(2024, 6, 10, 12, 0)
    assert du.is_today("2024-06-10T23:59", now)
    assert du.is_past("2024-06-09T23:59", now)
    assert not du.is_past("2024-06-10T00:00", now)
    assert du.is_future("2024-06-11T00:00", now)
    assert not du.is_future("2024-06-10T23:00", now)
    assert du.is_weekend("2024-06-15")
    assert not du.is_weekend("2024-06-14")
    assert not du.is_weekend("garbage")

from datetime import date, datetime, timedelta

import pytest

from backoffice.utils.date_range import (
    MAX_PERIOD_DAYS,
    end_of_day,
    last_of_month,
    month_key,
    parse_date_range,
    start_of_day,
)


NOW = datetime(2026, 3, 15, 10, 30)


def test_explicit_range_wins_over_period():
    start, end = parse_date_range("last_month", date(2026, 1, 1), date(2026, 1, 31), now=NOW)
    assert start == datetime(2026, 1, 1)
    assert end == end_of_day(date(2026, 1, 31))


def test_explicit_range_must_be_ordered():
    with pytest.raises(ValueError):
        parse_date_range(None, date(2026, 2, 1), date(2026, 1, 1), now=NOW)


def test_this_month():
    start, end = parse_date_range("this_month", now=NOW)
    assert start == datetime(2026, 3, 1)
    assert end == NOW


def test_last_month():
    start, end = parse_date_range("last_month", now=NOW)
    assert start == datetime(2026, 2, 1)
    assert end.date() == date(2026, 2, 28)


def test_last_month_in_january():
    start, end = parse_date_range("last_month", now=datetime(2026, 1, 10))
    assert start == datetime(2025, 12, 1)
    assert end.date() == date(2025, 12, 31)


def test_days_period():
    start, end = parse_date_range("30", now=NOW)
    assert end - start == timedelta(days=30)


def test_days_period_is_capped():
    start, end = parse_date_range("5000", now=NOW)
    assert end - start == timedelta(days=MAX_PERIOD_DAYS)


def test_unknown_period_falls_back_to_a_year():
    start, end = parse_date_range("whenever", now=NOW)
    assert end - start == timedelta(days=365)


def test_day_and_month_helpers():
    assert start_of_day(NOW) == datetime(2026, 3, 15)
    assert end_of_day(NOW).date() == date(2026, 3, 15)
    assert month_key(NOW) == "2026-03"
    assert last_of_month(date(2024, 2, 10)) == date(2024, 2, 29)
    assert last_of_month(date(2026, 12, 31)) == date(2026, 12, 31)


@pytest.mark.parametrize("start, end", [(date(2026, 1, 1), None), (None, date(2026, 1, 31))])
def test_half_open_range_is_rejected(start, end):
    with pytest.raises(ValueError, match="together"):
        parse_date_range("this_month", start, end, now=NOW)

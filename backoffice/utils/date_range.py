"""Reporting window helpers. All datetimes are naive UTC, matching func.now()."""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple, Union


DEFAULT_PERIOD_DAYS = 365
MAX_PERIOD_DAYS = 730


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def start_of_day(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def end_of_day(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.max)


def month_key(value: Union[date, datetime]) -> str:
    return value.strftime("%Y-%m")


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def last_of_month(value: date) -> date:
    return (first_of_month(value) + timedelta(days=32)).replace(day=1) - timedelta(days=1)


def parse_date_range(
    period: Optional[str] = "this_month",
    start: Optional[date] = None,
    end: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """
    Resolve a reporting window.

    Explicit start/end win and must be given together. Otherwise `period` is "this_month" (1st of the
    month until now), "last_month", or a number of days back from now
    (default 365, capped at 730).
    """
    now = now or utcnow()

    if bool(start) != bool(end):
        raise ValueError("start and end must be given together")
    if start and end:
        if start > end:
            raise ValueError("start must be on or before end")
        return start_of_day(start), end_of_day(end)

    if not period or period == "this_month":
        return start_of_day(first_of_month(now.date())), now

    if period == "last_month":
        previous = first_of_month(now.date()) - timedelta(days=1)
        return start_of_day(first_of_month(previous)), end_of_day(previous)

    try:
        days = int(period)
    except ValueError:
        days = DEFAULT_PERIOD_DAYS
    if days <= 0:
        days = DEFAULT_PERIOD_DAYS
    days = min(days, MAX_PERIOD_DAYS)
    return now - timedelta(days=days), now

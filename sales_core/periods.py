from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator, Literal, Tuple

Granularity = Literal["day", "week", "month", "quarter", "year"]

GRANULARITIES: Tuple[str, ...] = ("day", "week", "month", "quarter", "year")


def add_months(value: date, months: int) -> date:
    """Calendar-month arithmetic; the day is clamped to the target month's length."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def shift_years(value: date, years: int) -> date:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 into a non-leap year
        return value.replace(year=value.year + years, day=28)


def week_start(value: date) -> date:
    return value - timedelta(days=value.weekday())


def bucket_start(value: date, granularity: Granularity) -> date:
    if granularity == "day":
        return value
    if granularity == "week":
        return week_start(value)
    if granularity == "month":
        return value.replace(day=1)
    if granularity == "quarter":
        return date(value.year, 3 * ((value.month - 1) // 3) + 1, 1)
    if granularity == "year":
        return date(value.year, 1, 1)
    raise ValueError(f"Unknown granularity: {granularity!r}")


def next_bucket_start(start: date, granularity: Granularity) -> date:
    if granularity == "day":
        return start + timedelta(days=1)
    if granularity == "week":
        return start + timedelta(days=7)
    if granularity == "month":
        return add_months(start, 1)
    if granularity == "quarter":
        return add_months(start, 3)
    if granularity == "year":
        return date(start.year + 1, 1, 1)
    raise ValueError(f"Unknown granularity: {granularity!r}")


def bucket_bounds(value: date, granularity: Granularity) -> Tuple[date, date]:
    """Half-open ``[start, end)`` calendar bucket containing ``value``."""
    start = bucket_start(value, granularity)
    return start, next_bucket_start(start, granularity)


def iter_buckets(start: date, end: date, granularity: Granularity) -> Iterator[Tuple[date, date]]:
    """Every bucket intersecting the inclusive range ``[start, end]``, ascending."""
    if start > end:
        return
    current = bucket_start(start, granularity)
    while current <= end:
        following = next_bucket_start(current, granularity)
        yield current, following
        current = following


def bucket_label(start: date, granularity: Granularity) -> str:
    if granularity == "day":
        return start.isoformat()
    if granularity == "week":
        iso_year, iso_week, _ = start.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if granularity == "month":
        return f"{start.year}-{start.month:02d}"
    if granularity == "quarter":
        return f"{start.year}-Q{(start.month - 1) // 3 + 1}"
    if granularity == "year":
        return str(start.year)
    raise ValueError(f"Unknown granularity: {granularity!r}")


def iso_weeks_in_year(iso_year: int) -> int:
    # Dec 28 always falls in the last ISO week of its year.
    return date(iso_year, 12, 28).isocalendar()[1]


def same_iso_week_prior_year(start: date) -> date:
    """Monday of the same ISO week number one ISO year earlier (W53 falls back to W52)."""
    iso_year, iso_week, _ = start.isocalendar()
    target_year = iso_year - 1
    iso_week = min(iso_week, iso_weeks_in_year(target_year))
    return date.fromisocalendar(target_year, iso_week, 1)

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from sales_core.aggregate import bucket_total, group_records
from sales_core.records import SalesRecord, coerce_records


GRANULARITIES = ["day", "week", "month", "quarter", "year"]


@pytest.mark.parametrize("granularity", GRANULARITIES)
def test_sum_invariant(spread_records, granularity):
    start, end = date(2023, 2, 15), date(2023, 11, 20)
    points = group_records(spread_records, start, end, granularity)
    expected = sum((r.amount for r in spread_records if start <= r.date <= end), Decimal(0))
    assert sum((p.total_amount for p in points), Decimal(0)) == expected


@pytest.mark.parametrize("granularity", GRANULARITIES)
def test_buckets_are_sorted_and_contiguous(spread_records, granularity):
    points = group_records(spread_records, date(2022, 12, 1), date(2024, 3, 31), granularity)
    assert points
    for left, right in zip(points, points[1:]):
        assert left.period_start < right.period_start
        assert left.period_end == right.period_start


def test_partial_bucket_keeps_calendar_bounds():
    records = [SalesRecord(date(2023, 1, 10), Decimal(100)), SalesRecord(date(2023, 1, 20), Decimal(50))]
    points = group_records(records, date(2023, 1, 15), date(2023, 1, 31), "month")
    assert len(points) == 1
    assert points[0].period_start == date(2023, 1, 1)
    assert points[0].period_end == date(2023, 2, 1)
    assert points[0].total_amount == Decimal(50)
    assert points[0].label == "2023-01"


def test_empty_buckets_are_zero_filled():
    records = coerce_records([("2023-01-01", 5), ("2023-01-04", 7)])
    points = group_records(records, date(2023, 1, 1), date(2023, 1, 5), "day")
    assert [p.total_amount for p in points] == [Decimal(5), Decimal(0), Decimal(0), Decimal(7), Decimal(0)]
    assert all(p.moving_average is None and p.prior_year_amount is None for p in points)


def test_exact_decimal_totals():
    records = coerce_records([("2023-03-01", 0.1), ("2023-03-02", 0.2)])
    points = group_records(records, date(2023, 3, 1), date(2023, 3, 31), "month")
    assert points[0].total_amount == Decimal("0.3")


def test_inverted_range_yields_no_points(spread_records):
    assert group_records(spread_records, date(2023, 5, 1), date(2023, 1, 1), "day") == []


def test_bucket_total_uses_full_calendar_bucket():
    records = [SalesRecord(date(2022, 3, 1), Decimal(4)), SalesRecord(date(2022, 3, 31), Decimal(6)), SalesRecord(date(2022, 4, 1), Decimal(9))]
    assert bucket_total(records, date(2022, 3, 1), "month") == Decimal(10)
    assert bucket_total(records, date(2022, 1, 1), "quarter") == Decimal(10)
    assert bucket_total([], date(2022, 1, 1), "year") == Decimal(0)

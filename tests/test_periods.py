from __future__ import annotations

from datetime import date

import pytest

from sales_core.periods import (
    add_months,
    bucket_bounds,
    bucket_label,
    bucket_start,
    iter_buckets,
    same_iso_week_prior_year,
    shift_years,
)


@pytest.mark.parametrize(
    "value, months, expected",
    [
        (date(2024, 3, 31), -1, date(2024, 2, 29)),
        (date(2023, 3, 31), -1, date(2023, 2, 28)),
        (date(2023, 1, 15), -3, date(2022, 10, 15)),
        (date(2023, 12, 31), 2, date(2024, 2, 29)),
        (date(2024, 3, 31), -6, date(2023, 9, 30)),
        (date(2024, 3, 31), -12, date(2023, 3, 31)),
    ],
)
def test_add_months_clamps_day(value, months, expected):
    assert add_months(value, months) == expected


def test_shift_years_maps_leap_day_to_feb_28():
    assert shift_years(date(2024, 2, 29), -1) == date(2023, 2, 28)
    assert shift_years(date(2024, 3, 1), -1) == date(2023, 3, 1)
    assert shift_years(date(2023, 2, 28), 1) == date(2024, 2, 28)


def test_bucket_start_per_granularity():
    d = date(2023, 8, 15)  # a Tuesday
    assert bucket_start(d, "day") == d
    assert bucket_start(d, "week") == date(2023, 8, 14)
    assert bucket_start(d, "month") == date(2023, 8, 1)
    assert bucket_start(d, "quarter") == date(2023, 7, 1)
    assert bucket_start(d, "year") == date(2023, 1, 1)


def test_week_bucket_crosses_year_boundary():
    assert bucket_bounds(date(2023, 1, 1), "week") == (date(2022, 12, 26), date(2023, 1, 2))
    assert bucket_label(date(2022, 12, 26), "week") == "2022-W52"
    assert bucket_label(date(2023, 1, 2), "week") == "2023-W01"


def test_quarter_bounds_roll_into_next_year():
    assert bucket_bounds(date(2023, 11, 30), "quarter") == (date(2023, 10, 1), date(2024, 1, 1))


def test_labels():
    assert bucket_label(date(2023, 1, 5), "day") == "2023-01-05"
    assert bucket_label(date(2023, 2, 1), "month") == "2023-02"
    assert bucket_label(date(2023, 7, 1), "quarter") == "2023-Q3"
    assert bucket_label(date(2023, 1, 1), "year") == "2023"


def test_iter_buckets_covers_partial_edges():
    buckets = list(iter_buckets(date(2023, 1, 15), date(2023, 3, 2), "month"))
    assert buckets == [
        (date(2023, 1, 1), date(2023, 2, 1)),
        (date(2023, 2, 1), date(2023, 3, 1)),
        (date(2023, 3, 1), date(2023, 4, 1)),
    ]


def test_iter_buckets_inverted_range_is_empty():
    assert list(iter_buckets(date(2023, 3, 1), date(2023, 1, 1), "day")) == []


def test_unknown_granularity_raises():
    with pytest.raises(ValueError):
        bucket_start(date(2023, 1, 1), "fortnight")  # type: ignore[arg-type]


def test_same_iso_week_prior_year():
    # 2024-W01 starts on Monday 2024-01-01; 2023-W01 starts on 2023-01-02.
    assert same_iso_week_prior_year(date(2024, 1, 1)) == date(2023, 1, 2)
    # 2020 has 53 ISO weeks, 2019 only 52.
    assert same_iso_week_prior_year(date(2020, 12, 28)) == date(2019, 12, 23)

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional, Tuple

from sales_core.aggregate import Records, as_records
from sales_core.comparison import percent_change
from sales_core.periods import add_months, shift_years, week_start
from sales_core.records import decimal_sum

MetricWindow = Literal["YTD", "MTD", "WTD", "L3M", "L6M", "L12M"]
Direction = Literal["up", "down", "flat", "n/a"]

METRIC_WINDOWS: Tuple[str, ...] = ("YTD", "MTD", "WTD", "L3M", "L6M", "L12M")
_TRAILING_MONTHS = {"L3M": 3, "L6M": 6, "L12M": 12}


@dataclass(frozen=True)
class SummaryMetric:
    window: MetricWindow
    start: date
    end: date
    current_value: Decimal
    prior_value: Decimal
    percent_change: Optional[Decimal]
    direction: Direction


def window_bounds(window: MetricWindow, reference_date: date) -> Tuple[date, date]:
    """Inclusive ``(start, end)`` of a period-to-date or trailing window."""
    if window == "YTD":
        return date(reference_date.year, 1, 1), reference_date
    if window == "MTD":
        return reference_date.replace(day=1), reference_date
    if window == "WTD":
        return week_start(reference_date), reference_date
    if window in _TRAILING_MONTHS:
        return add_months(reference_date, -_TRAILING_MONTHS[window]), reference_date
    raise ValueError(f"Unknown metric window: {window!r}")


def direction_of(current: Decimal, prior: Decimal) -> Direction:
    if prior == 0:
        return "flat" if current == 0 else "n/a"
    if current > prior:
        return "up"
    if current < prior:
        return "down"
    return "flat"


def _window_sum(rows, start: date, end: date) -> Decimal:
    return decimal_sum(r.amount for r in rows if start <= r.date <= end)


def summarize(records: Records, reference_date: date) -> List[SummaryMetric]:
    rows = as_records(records)
    metrics: List[SummaryMetric] = []
    for window in METRIC_WINDOWS:
        start, end = window_bounds(window, reference_date)
        current = _window_sum(rows, start, end)
        prior = _window_sum(rows, shift_years(start, -1), shift_years(end, -1))
        metrics.append(
            SummaryMetric(
                window=window,  # type: ignore[arg-type]
                start=start,
                end=end,
                current_value=current,
                prior_value=prior,
                percent_change=percent_change(current, prior),
                direction=direction_of(current, prior),
            )
        )
    return metrics

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sales_core.aggregate import GroupedPoint, Records, as_records, bucket_total
from sales_core.periods import Granularity, bucket_start, next_bucket_start, same_iso_week_prior_year, shift_years

HUNDRED = Decimal(100)


def percent_change(current: Decimal, prior: Optional[Decimal]) -> Optional[Decimal]:
    """``(current - prior) / prior * 100``; ``None`` when there is no usable prior."""
    if prior is None or prior == 0:
        return None
    return (current - prior) / prior * HUNDRED


def prior_period_start(period_start: date, granularity: Granularity) -> date:
    if granularity == "week":
        # ISO week number alignment; calendar dates drift against week boundaries.
        return same_iso_week_prior_year(period_start)
    return bucket_start(shift_years(period_start, -1), granularity)


def pair_with_prior_year(
    series: Sequence[GroupedPoint],
    records: Records,
    granularity: Granularity,
    range_start: Optional[date] = None,
) -> List[GroupedPoint]:
    """Fill ``prior_year_amount`` and ``percent_change_vs_prior_year`` for each point.

    The prior bucket's total comes from the series when the series holds the
    whole bucket; a bucket clipped by ``range_start`` (or absent from the series)
    is recomputed from ``records``. Buckets that end before the first record are
    treated as missing rather than zero.
    """
    rows = as_records(records)
    history_start = min((r.date for r in rows), default=None)
    in_series: Dict[date, Decimal] = {p.period_start: p.total_amount for p in series}

    out: List[GroupedPoint] = []
    for point in series:
        prior_start = prior_period_start(point.period_start, granularity)
        prior_end = next_bucket_start(prior_start, granularity)
        fully_covered = range_start is None or prior_start >= range_start
        if prior_start in in_series and fully_covered:
            prior_amount: Optional[Decimal] = in_series[prior_start]
        elif history_start is None or prior_end <= history_start:
            prior_amount = None
        else:
            prior_amount = bucket_total(rows, prior_start, granularity)
        out.append(
            replace(
                point,
                prior_year_amount=prior_amount,
                percent_change_vs_prior_year=percent_change(point.total_amount, prior_amount),
            )
        )
    return out

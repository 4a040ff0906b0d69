from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from sales_core.periods import Granularity, bucket_label, bucket_start, iter_buckets, next_bucket_start
from sales_core.records import ZERO, RecordSet, SalesRecord, decimal_sum, records_in_range

logger = logging.getLogger(__name__)

Records = Union[RecordSet, Iterable[SalesRecord]]


@dataclass(frozen=True)
class GroupedPoint:
    period_start: date
    period_end: date
    label: str
    total_amount: Decimal
    moving_average: Optional[Decimal] = None
    is_anomaly: bool = False
    prior_year_amount: Optional[Decimal] = None
    percent_change_vs_prior_year: Optional[Decimal] = None


def as_records(records: Records) -> List[SalesRecord]:
    if isinstance(records, RecordSet):
        return list(records.records)
    return list(records)


def _bucket_totals(records: List[SalesRecord], granularity: Granularity) -> Dict[date, Decimal]:
    if not records:
        return {}
    frame = RecordSet(records=tuple(records)).to_frame()
    frame["period_start"] = frame["date"].map(lambda d: bucket_start(d, granularity))
    # Decimal amounts live in an object column; summing them in Python keeps the totals exact.
    totals = frame.groupby("period_start")["amount"].agg(decimal_sum)
    return {start: Decimal(total) for start, total in totals.items()}


def group_records(records: Records, start: date, end: date, granularity: Granularity) -> List[GroupedPoint]:
    """Group records into calendar buckets intersecting ``[start, end]``.

    Buckets keep their calendar boundaries even when the range clips them; only
    records inside the range are counted. Empty buckets are emitted with a zero
    total so the series is continuous.
    """
    if start > end:
        return []
    in_range = records_in_range(as_records(records), start, end)
    totals = _bucket_totals(in_range, granularity)
    points = [
        GroupedPoint(
            period_start=period_start,
            period_end=period_end,
            label=bucket_label(period_start, granularity),
            total_amount=totals.get(period_start, ZERO),
        )
        for period_start, period_end in iter_buckets(start, end, granularity)
    ]
    logger.debug(
        "Grouped %d records into %d %s buckets (%s..%s)", len(in_range), len(points), granularity, start, end
    )
    return points


def bucket_total(records: Records, period_start: date, granularity: Granularity) -> Decimal:
    """Total of the full calendar bucket starting at ``period_start``."""
    period_end = next_bucket_start(period_start, granularity)
    return decimal_sum(r.amount for r in as_records(records) if period_start <= r.date < period_end)

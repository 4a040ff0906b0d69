from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from sales_core.aggregate import GroupedPoint, group_records
from sales_core.anomaly import annotate
from sales_core.comparison import pair_with_prior_year
from sales_core.filters import EngineSettings, FilterState, normalize_filters, normalize_settings
from sales_core.records import ExcludedRecord, RecordSet, coerce_records
from sales_core.summary import SummaryMetric, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardResult:
    filters: FilterState
    reference_date: date
    series: Tuple[GroupedPoint, ...]
    summary: Tuple[SummaryMetric, ...]
    excluded: Tuple[ExcludedRecord, ...] = ()

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)


def recompute(
    all_records: object,
    filters: Union[FilterState, Mapping[str, Any]],
    *,
    reference_date: Optional[date] = None,
    settings: Union[EngineSettings, Mapping[str, Any], None] = None,
) -> DashboardResult:
    """Build the dashboard series and summary cards for one filter state.

    Pure for a fixed ``reference_date``; when it is omitted the summary windows
    are anchored on ``date.today()``.
    """
    started = time.perf_counter()
    if not isinstance(filters, FilterState):
        filters = normalize_filters(filters)
    if not isinstance(settings, EngineSettings):
        settings = normalize_settings(settings)
    reference_date = reference_date or date.today()
    record_set: RecordSet = coerce_records(all_records)

    series: List[GroupedPoint] = group_records(
        record_set, filters.start_date, filters.end_date, filters.granularity
    )
    if filters.needs_moving_average:
        series = annotate(series, settings.window_size, settings.anomaly_threshold)
    if filters.show_past_period:
        series = pair_with_prior_year(series, record_set, filters.granularity, filters.start_date)
    summary = summarize(record_set, reference_date)

    logger.debug(
        "recompute: %d points, %d excluded, %.1fms",
        len(series),
        record_set.excluded_count,
        (time.perf_counter() - started) * 1000,
    )
    return DashboardResult(
        filters=filters,
        reference_date=reference_date,
        series=tuple(series),
        summary=tuple(summary),
        excluded=record_set.excluded,
    )


def result_payload(result: DashboardResult) -> Dict[str, Any]:
    return {
        "filters": asdict(result.filters),
        "reference_date": result.reference_date,
        "series": [asdict(p) for p in result.series],
        "summary": [asdict(m) for m in result.summary],
        "diagnostics": {
            "excluded_count": result.excluded_count,
            "excluded": [asdict(e) for e in result.excluded],
        },
    }

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import List, Sequence, Union

from sales_core.aggregate import GroupedPoint
from sales_core.filters import EngineSettings
from sales_core.records import decimal_sum

DEFAULT_WINDOW_SIZE = EngineSettings().window_size
DEFAULT_THRESHOLD = EngineSettings().anomaly_threshold


def annotate(
    series: Sequence[GroupedPoint],
    window_size: int = DEFAULT_WINDOW_SIZE,
    threshold: Union[Decimal, str] = DEFAULT_THRESHOLD,
) -> List[GroupedPoint]:
    """Attach a trailing moving average and an anomaly flag to each point.

    The first ``window_size - 1`` points have no average and are never flagged.
    A point is an anomaly when it deviates from its average by more than
    ``threshold`` (a fraction, 0.20 = 20%) and the average is non-zero.
    """
    if isinstance(window_size, bool) or int(window_size) < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size!r}")
    window_size = int(window_size)
    threshold = Decimal(str(threshold))

    out: List[GroupedPoint] = []
    for i, point in enumerate(series):
        if i + 1 < window_size:
            out.append(replace(point, moving_average=None, is_anomaly=False))
            continue
        window = series[i + 1 - window_size : i + 1]
        average = decimal_sum(p.total_amount for p in window) / window_size
        is_anomaly = average != 0 and abs(point.total_amount - average) / abs(average) > threshold
        out.append(replace(point, moving_average=average, is_anomaly=bool(is_anomaly)))
    return out

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from sales_core.periods import GRANULARITIES, Granularity


class InvalidFilterError(ValueError):
    """Raised when a filter or settings payload cannot be normalized."""


@dataclass(frozen=True)
class EngineSettings:
    window_size: int = 3
    anomaly_threshold: Decimal = Decimal("0.20")


@dataclass(frozen=True)
class FilterState:
    start_date: date
    end_date: date
    granularity: Granularity = "month"
    show_anomalies: bool = False
    show_moving_average: bool = False
    show_past_period: bool = False

    @property
    def is_empty_range(self) -> bool:
        return self.start_date > self.end_date

    @property
    def needs_moving_average(self) -> bool:
        return self.show_anomalies or self.show_moving_average


def _get(raw: Mapping[str, Any], snake: str, camel: str) -> Any:
    if snake in raw:
        return raw[snake]
    return raw.get(camel)


def _as_date(value: Any, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidFilterError(f"{name} is not an ISO date: {value!r}") from exc
    raise InvalidFilterError(f"{name} is required")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def normalize_filters(raw: Mapping[str, Any]) -> FilterState:
    start_date = _as_date(_get(raw, "start_date", "startDate"), "start_date")
    end_date = _as_date(_get(raw, "end_date", "endDate"), "end_date")

    granularity = str(raw.get("granularity") or "month").strip().lower()
    if granularity not in GRANULARITIES:
        raise InvalidFilterError(f"granularity must be one of {', '.join(GRANULARITIES)}; got {granularity!r}")

    return FilterState(
        start_date=start_date,
        end_date=end_date,
        granularity=granularity,  # type: ignore[arg-type]
        show_anomalies=_as_bool(_get(raw, "show_anomalies", "showAnomalies")),
        show_moving_average=_as_bool(_get(raw, "show_moving_average", "showMovingAverage")),
        show_past_period=_as_bool(_get(raw, "show_past_period", "showPastPeriod")),
    )


def normalize_settings(raw: Optional[Mapping[str, Any]]) -> EngineSettings:
    raw = raw or {}
    defaults = EngineSettings()

    window_size = _get(raw, "window_size", "windowSize")
    if window_size is None:
        window_size = defaults.window_size
    if isinstance(window_size, bool) or not isinstance(window_size, int) or window_size < 1:
        raise InvalidFilterError(f"window_size must be a positive integer; got {window_size!r}")

    threshold = _get(raw, "anomaly_threshold", "anomalyThreshold")
    if threshold is None:
        threshold = defaults.anomaly_threshold
    try:
        threshold = Decimal(str(threshold))
    except InvalidOperation as exc:
        raise InvalidFilterError(f"anomaly_threshold must be numeric; got {threshold!r}") from exc
    if not threshold.is_finite() or threshold < 0:
        raise InvalidFilterError(f"anomaly_threshold must be a finite, non-negative number; got {threshold!r}")

    return EngineSettings(window_size=window_size, anomaly_threshold=threshold)

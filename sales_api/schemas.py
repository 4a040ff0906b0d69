from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FilterStateModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    # checked case-insensitively by normalize_filters
    granularity: str = "month"
    show_anomalies: bool = Field(default=False, alias="showAnomalies")
    show_moving_average: bool = Field(default=False, alias="showMovingAverage")
    show_past_period: bool = Field(default=False, alias="showPastPeriod")


class EngineSettingsModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    window_size: int = Field(default=3, ge=1, alias="windowSize")
    anomaly_threshold: Decimal = Field(default=Decimal("0.20"), ge=0, alias="anomalyThreshold")


class RecordsRequest(BaseModel):
    # Rows are validated by the engine so malformed ones are counted, not rejected.
    records: List[Any] = Field(default_factory=list)


class SummaryRequest(RecordsRequest):
    reference_date: Optional[date] = None


class RecomputeRequest(SummaryRequest):
    filters: FilterStateModel
    settings: Optional[EngineSettingsModel] = None

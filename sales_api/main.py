from __future__ import annotations

from dataclasses import asdict, fields
from datetime import date
from decimal import Decimal
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from sales_api.schemas import RecomputeRequest, RecordsRequest, SummaryRequest
from sales_core.aggregate import GroupedPoint
from sales_core.controller import DashboardResult, recompute, result_payload
from sales_core.filters import EngineSettings, InvalidFilterError, normalize_filters, normalize_settings
from sales_core.metrics_debug import compute_debug
from sales_core.periods import GRANULARITIES
from sales_core.records import coerce_records
from sales_core.summary import METRIC_WINDOWS, summarize


app = FastAPI(title="Sales Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _safe_float(value: object) -> float | None:
    try:
        out = float(value)  # type: ignore[arg-type]
    except Exception:
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for Decimal/pandas/numpy objects."""
    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                Decimal: _safe_float,
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return _error(exc, 422)


def _run(request: RecomputeRequest) -> DashboardResult:
    filters = normalize_filters(request.filters.model_dump())
    settings = normalize_settings(request.settings.model_dump()) if request.settings else EngineSettings()
    return recompute(request.records, filters, reference_date=request.reference_date, settings=settings)


@app.get("/meta/granularities")
def meta_granularities():
    return _json({"granularities": list(GRANULARITIES), "windows": list(METRIC_WINDOWS)})


@app.post("/recompute")
def recompute_dashboard(request: RecomputeRequest):
    try:
        return _json(result_payload(_run(request)))
    except InvalidFilterError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("recompute failed")
        return _error(exc, 500)


@app.post("/summary")
def summary(request: SummaryRequest):
    try:
        record_set = coerce_records(request.records)
        reference_date = request.reference_date or date.today()
        metrics = summarize(record_set, reference_date)
        return _json(
            {
                "reference_date": reference_date,
                "summary": [asdict(m) for m in metrics],
                "excluded_count": record_set.excluded_count,
            }
        )
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc, 500)


@app.post("/debug")
def debug(request: RecordsRequest):
    try:
        return _json(compute_debug(coerce_records(request.records)))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc, 500)


@app.post("/export/series")
def export_series(request: RecomputeRequest):
    try:
        result = _run(request)
        export_df = pd.DataFrame([asdict(p) for p in result.series], columns=[f.name for f in fields(GroupedPoint)])
        csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    except InvalidFilterError as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("export_series failed")
        return _error(exc, 500)
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=series.csv"},
    )

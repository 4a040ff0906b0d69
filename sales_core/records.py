from __future__ import annotations

import logging
import math
import numbers
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger(__name__)

RECORD_COLUMNS = {
    "Date": "date",
    "OrderDate": "date",
    "order_date": "date",
    "created_at": "date",
    "day": "date",
    "Amount": "amount",
    "TotalAmount": "amount",
    "total_amount": "amount",
    "revenue": "amount",
    "value": "amount",
}

ZERO = Decimal(0)


@dataclass(frozen=True)
class SalesRecord:
    date: date
    amount: Decimal


@dataclass(frozen=True)
class ExcludedRecord:
    index: int
    reason: str
    value: Optional[str] = None


@dataclass(frozen=True)
class RecordSet:
    records: Tuple[SalesRecord, ...] = ()
    excluded: Tuple[ExcludedRecord, ...] = ()

    @property
    def excluded_count(self) -> int:
        return len(self.excluded)

    @property
    def first_date(self) -> Optional[date]:
        return self.records[0].date if self.records else None

    @property
    def last_date(self) -> Optional[date]:
        return self.records[-1].date if self.records else None

    def excluded_by_reason(self) -> Dict[str, int]:
        return dict(Counter(e.reason for e in self.excluded))

    def to_frame(self) -> pd.DataFrame:
        if not self.records:
            return pd.DataFrame({"date": pd.Series(dtype=object), "amount": pd.Series(dtype=object)})
        return pd.DataFrame(
            {
                "date": [r.date for r in self.records],
                "amount": [r.amount for r in self.records],
            }
        )


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def _is_missing(value: object) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def parse_date(value: object) -> Tuple[Optional[date], Optional[str]]:
    if _is_missing(value):
        return None, "missing_date"
    if isinstance(value, float) and math.isnan(value):
        return None, "missing_date"
    if isinstance(value, datetime):
        return value.date(), None
    if isinstance(value, date):
        return value, None
    if isinstance(value, str):
        parsed = pd.to_datetime(value.strip(), errors="coerce")
        if parsed is pd.NaT or pd.isna(parsed):
            return None, "invalid_date"
        return parsed.date(), None
    return None, "invalid_date"


def parse_amount(value: object) -> Tuple[Optional[Decimal], Optional[str]]:
    if _is_missing(value):
        return None, "missing_amount"
    if isinstance(value, bool):
        return None, "invalid_amount"
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, numbers.Integral):
        amount = Decimal(int(value))
    elif isinstance(value, numbers.Real):
        as_float = float(value)
        if not math.isfinite(as_float):
            return None, "non_finite_amount"
        # str() keeps 0.1 as 0.1 rather than its binary expansion
        amount = Decimal(str(as_float))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            return None, "invalid_amount"
    else:
        return None, "invalid_amount"
    if not amount.is_finite():
        return None, "non_finite_amount"
    return amount, None


def _pick(row: Mapping[str, Any], canonical: str) -> Any:
    if canonical in row:
        return row[canonical]
    for column, target in RECORD_COLUMNS.items():
        if target == canonical and column in row:
            return row[column]
    return None


def _fields(item: object) -> Optional[Tuple[Any, Any]]:
    if isinstance(item, SalesRecord):
        return item.date, item.amount
    if isinstance(item, Mapping):
        return _pick(item, "date"), _pick(item, "amount")
    if isinstance(item, (tuple, list)) and len(item) == 2:
        return item[0], item[1]
    return None


def _short(value: object) -> str:
    text = str(value)
    return text if len(text) <= 120 else text[:117] + "..."


def coerce_records(raw: object) -> RecordSet:
    """Turn raw input rows into valid, date-sorted ``SalesRecord``s.

    Rows with a missing/unparseable date or a missing/non-finite amount are
    skipped and reported in ``RecordSet.excluded``; nothing here raises for bad
    data.
    """
    if raw is None:
        return RecordSet()
    if isinstance(raw, RecordSet):
        return raw
    if isinstance(raw, pd.DataFrame):
        rows: Iterable[object] = raw.to_dict(orient="records")
    else:
        rows = raw

    valid: List[SalesRecord] = []
    excluded: List[ExcludedRecord] = []
    for index, item in enumerate(rows):
        fields = _fields(item)
        if fields is None:
            excluded.append(ExcludedRecord(index, "unrecognized_record", _short(item)))
            continue
        raw_date, raw_amount = fields
        parsed_date, problem = parse_date(raw_date)
        if problem:
            excluded.append(ExcludedRecord(index, problem, None if raw_date is None else _short(raw_date)))
            continue
        amount, problem = parse_amount(raw_amount)
        if problem:
            excluded.append(ExcludedRecord(index, problem, None if raw_amount is None else _short(raw_amount)))
            continue
        valid.append(SalesRecord(date=parsed_date, amount=amount))

    valid.sort(key=lambda r: r.date)
    if excluded:
        logger.warning(
            "Excluded %d of %d sales records: %s",
            len(excluded),
            len(excluded) + len(valid),
            dict(Counter(e.reason for e in excluded)),
        )
    return RecordSet(records=tuple(valid), excluded=tuple(excluded))


def records_in_range(records: Iterable[SalesRecord], start: date, end: date) -> List[SalesRecord]:
    """Records with ``start <= date <= end``."""
    return [r for r in records if start <= r.date <= end]

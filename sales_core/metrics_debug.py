from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from sales_core.records import RecordSet, decimal_sum


def compute_debug(record_set: RecordSet) -> Dict[str, Any]:
    frame = record_set.to_frame()
    payload: Dict[str, Any] = {
        "row_counts": {
            "valid_rows": int(len(record_set.records)),
            "excluded_rows": int(record_set.excluded_count),
        },
        "excluded_by_reason": record_set.excluded_by_reason(),
        "date_coverage": {
            "first_date": record_set.first_date,
            "last_date": record_set.last_date,
        },
        "yearly_totals": [],
        "excluded_sample": [asdict(e) for e in record_set.excluded[:20]],
    }

    if not frame.empty:
        frame["year"] = frame["date"].map(lambda d: d.year)
        yearly = (
            frame.groupby("year")
            .agg(rows=("amount", "size"), total_amount=("amount", decimal_sum))
            .reset_index()
            .sort_values("year")
        )
        payload["yearly_totals"] = [
            {"year": int(r["year"]), "rows": int(r["rows"]), "total_amount": r["total_amount"]}
            for r in yearly.to_dict(orient="records")
        ]
    return payload

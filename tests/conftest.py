from __future__ import annotations

import pathlib
import sys
from datetime import date
from decimal import Decimal

import pytest


REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.append(str(REPO_ROOT))


@pytest.fixture()
def weekly_records():
    return [
        {"date": "2023-01-01", "amount": 100},
        {"date": "2023-01-08", "amount": 100},
        {"date": "2023-01-15", "amount": 300},
        {"date": "2024-01-01", "amount": 120},
    ]


@pytest.fixture()
def spread_records():
    from sales_core.records import SalesRecord

    rows = []
    day = date(2022, 11, 3)
    for i in range(160):
        rows.append(SalesRecord(date=day, amount=Decimal(i % 7) * Decimal("12.35") + Decimal("0.10")))
        day = date.fromordinal(day.toordinal() + 5)
    return rows

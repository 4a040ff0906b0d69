"""Core (UI-agnostic) sales analytics logic.

This package contains:
- record intake (raw rows -> validated SalesRecords)
- filter/settings normalization
- period grouping, moving-average anomalies, prior-year comparison
- period-to-date summary cards
- recompute orchestration (JSON-serializable payloads)
"""

"""Export of stored metric records as CSV or JSON, filtered by type and date range."""
from __future__ import annotations

import csv
import io
from datetime import date, datetime, timedelta
from typing import Collection, List, Optional, Sequence

from healthtrack.schemas.exports import ExportedReport, HealthExportOut
from healthtrack.schemas.metrics import HealthMetricRecord
from healthtrack.services.health_stats import newest_first

EXPORT_RANGES = ("all", "7days", "30days", "90days", "1year", "custom")
_RANGE_DAYS = {"7days": 7, "30days": 30, "90days": 90, "1year": 365}

CSV_HEADERS = [
    "Date",
    "Type",
    "Value",
    "Unit",
    "Systolic",
    "Diastolic",
    "Total Cholesterol",
    "HDL",
    "LDL",
    "Notes",
]


def select_records(
    records: Sequence[HealthMetricRecord],
    today: date,
    *,
    types: Optional[Collection[str]] = None,
    date_range: str = "all",
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[HealthMetricRecord]:
    """Filter records for export; ``custom`` needs both ``start`` and ``end`` (inclusive)."""
    if date_range not in EXPORT_RANGES:
        raise ValueError(f"range must be one of {', '.join(EXPORT_RANGES)}")
    selected = newest_first(records)
    if types:
        selected = [r for r in selected if r.type.value in types]
    if date_range == "custom":
        if start is None or end is None:
            raise ValueError("custom range needs both start and end dates")
        if start > end:
            raise ValueError("start must not be after end")
        return [r for r in selected if start <= r.date <= end]
    if date_range in _RANGE_DAYS:
        earliest = today - timedelta(days=_RANGE_DAYS[date_range])
        return [r for r in selected if r.date >= earliest]
    return selected


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_csv(records: Sequence[HealthMetricRecord]) -> str:
    """Render one quoted CSV row per record; an empty selection yields an empty string."""
    if not records:
        return ""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow([
            record.date.isoformat(),
            record.type.value,
            _cell(getattr(record, "value", None)),
            record.unit,
            _cell(getattr(record, "systolic", None)),
            _cell(getattr(record, "diastolic", None)),
            _cell(getattr(record, "total", None)),
            _cell(getattr(record, "hdl", None)),
            _cell(getattr(record, "ldl", None)),
            record.notes or "",
        ])
    return buf.getvalue()


def to_export_document(
    records: Sequence[HealthMetricRecord],
    exported_at: datetime,
    date_range: str,
    reports: Optional[Sequence] = None,
) -> HealthExportOut:
    return HealthExportOut(
        export_date=exported_at,
        total_records=len(records),
        date_range=date_range,
        health_metrics=list(records),
        reports=[ExportedReport.model_validate(r) for r in reports] if reports else None,
    )


def export_filename(exported_at: datetime, extension: str) -> str:
    return f"health-data-{exported_at:%Y%m%d-%H%M%S}.{extension}"


__all__ = [
    "EXPORT_RANGES",
    "CSV_HEADERS",
    "select_records",
    "to_csv",
    "to_export_document",
    "export_filename",
]

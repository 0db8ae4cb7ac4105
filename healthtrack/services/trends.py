"""Per-type time series and first-to-last trend over a trailing window of days."""
from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple

from healthtrack.schemas.metrics import HealthMetricRecord
from healthtrack.schemas.trends import TrendOut, TrendPoint, TrendSeries
from healthtrack.services.metric_types import MetricCategory, MetricType, canonical_unit, category_of, display_name

DEFAULT_TREND_DAYS = 30
MAX_TREND_DAYS = 3650


def window_records(
    records: Sequence[HealthMetricRecord],
    metric_type: MetricType,
    days: int,
    today: date,
) -> List[HealthMetricRecord]:
    """Records of ``metric_type`` dated within ``days`` before ``today``, oldest first."""
    start = today - timedelta(days=days)
    selected = [r for r in records if r.type is metric_type and start <= r.date <= today]
    return sorted(selected, key=lambda r: (r.date, r.created_at))


def _series_fields(metric_type: MetricType) -> List[Tuple[str, str]]:
    category = category_of(metric_type)
    if category is MetricCategory.BLOOD_PRESSURE:
        return [("Systolic", "systolic"), ("Diastolic", "diastolic")]
    if category is MetricCategory.LIPID_PANEL:
        return [("Total Cholesterol", "total"), ("HDL", "hdl"), ("LDL", "ldl")]
    return [(display_name(metric_type), "value")]


def build_series(records: Sequence[HealthMetricRecord], metric_type: MetricType) -> List[TrendSeries]:
    series = []
    for label, attr in _series_fields(metric_type):
        points = [TrendPoint(date=r.date, value=getattr(r, attr, None)) for r in records]
        # optional panel parts are only charted when some reading has them
        if attr in ("hdl", "ldl") and all(p.value is None for p in points):
            continue
        series.append(TrendSeries(label=label, unit=canonical_unit(metric_type), points=points))
    return series


def _primary_value(record: HealthMetricRecord) -> Optional[float]:
    for attr in ("value", "systolic", "total"):
        value = getattr(record, attr, None)
        if value is not None:
            return value
    return None


def compute_trend(records: Sequence[HealthMetricRecord]) -> Tuple[str, float]:
    """Return ``(direction, percent)`` from the first to the last record (oldest first)."""
    if len(records) < 2:
        return "neutral", 0.0
    first, last = _primary_value(records[0]), _primary_value(records[-1])
    if not first or last is None:
        return "neutral", 0.0
    change = last - first
    percent = abs(round(change / first * 100, 1))
    if change > 0:
        return "up", percent
    if change < 0:
        return "down", percent
    return "neutral", 0.0


def metric_trend(
    records: Sequence[HealthMetricRecord],
    metric_type: MetricType,
    days: int,
    today: date,
) -> TrendOut:
    in_window = window_records(records, metric_type, days, today)
    direction, percent = compute_trend(in_window)
    return TrendOut(
        type=metric_type,
        display_name=display_name(metric_type),
        days=days,
        start=today - timedelta(days=days),
        end=today,
        series=build_series(in_window, metric_type) if in_window else [],
        trend=direction,
        change_percent=percent,
    )


__all__ = [
    "DEFAULT_TREND_DAYS",
    "MAX_TREND_DAYS",
    "window_records",
    "build_series",
    "compute_trend",
    "metric_trend",
]

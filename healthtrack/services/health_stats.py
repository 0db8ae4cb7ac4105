"""Summary statistics and period filters over stored metric records."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from healthtrack.schemas.metrics import HealthMetricRecord
from healthtrack.schemas.stats import HealthStats
from healthtrack.services.insights import RULES
from healthtrack.services.metric_types import GLUCOSE_TYPES, MetricType, format_metric_value

PERIODS = ("latest", "week", "month", "all")
_PERIOD_DAYS = {"week": 7, "month": 30}


def newest_first(records: Sequence[HealthMetricRecord]) -> List[HealthMetricRecord]:
    return sorted(records, key=lambda r: (r.date, r.created_at), reverse=True)


def filter_by_period(
    records: Sequence[HealthMetricRecord],
    period: str,
    today: date,
) -> List[HealthMetricRecord]:
    """Apply a listing period filter; the result is always newest first."""
    if period not in PERIODS:
        raise ValueError(f"period must be one of {', '.join(PERIODS)}")
    ordered = newest_first(records)
    if period == "latest":
        seen: Dict[MetricType, HealthMetricRecord] = {}
        for record in ordered:
            seen.setdefault(record.type, record)
        return list(seen.values())
    if period in _PERIOD_DAYS:
        start = today - timedelta(days=_PERIOD_DAYS[period])
        return [r for r in ordered if r.date >= start]
    return ordered


def calculate_bmi(weight_kg: Optional[float], height_cm: Optional[float]) -> Optional[float]:
    if not weight_kg or not height_cm:
        return None
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(bmi: Optional[float], rules: Optional[dict] = None) -> Optional[str]:
    if bmi is None:
        return None
    limits = (rules or RULES)["bmi"]
    if bmi < limits["underweight_below"]:
        return "Underweight"
    if bmi < limits["normal_below"]:
        return "Normal weight"
    if bmi < limits["overweight_below"]:
        return "Overweight"
    return "Obese"


def compute_stats(records: Sequence[HealthMetricRecord], total_reports: int) -> HealthStats:
    ordered = newest_first(records)

    def latest(*types: MetricType) -> Optional[HealthMetricRecord]:
        return next((r for r in ordered if r.type in types), None)

    blood_pressure = latest(MetricType.BLOOD_PRESSURE)
    blood_sugar = latest(*GLUCOSE_TYPES)
    cholesterol = latest(MetricType.CHOLESTEROL, MetricType.TOTAL_CHOLESTEROL)
    height = latest(MetricType.HEIGHT)
    weight = latest(MetricType.WEIGHT)

    bmi = calculate_bmi(
        weight.value if weight else None,
        height.value if height else None,
    )
    return HealthStats(
        total_reports=total_reports,
        total_metrics=len(ordered),
        latest_blood_pressure=format_metric_value(blood_pressure) if blood_pressure else None,
        latest_blood_sugar=format_metric_value(blood_sugar) if blood_sugar else None,
        latest_cholesterol=format_metric_value(cholesterol) if cholesterol else None,
        latest_height=format_metric_value(height) if height else None,
        latest_weight=format_metric_value(weight) if weight else None,
        current_bmi=bmi,
        bmi_category=bmi_category(bmi),
    )


__all__ = [
    "PERIODS",
    "newest_first",
    "filter_by_period",
    "calculate_bmi",
    "bmi_category",
    "compute_stats",
]

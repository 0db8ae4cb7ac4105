"""Dashboard insights derived from the stored metrics."""
from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional, Sequence

import yaml

from healthtrack.schemas.metrics import BloodPressureRecord, HealthMetricRecord
from healthtrack.schemas.stats import HealthStats, Insight
from healthtrack.services.metric_types import GLUCOSE_TYPES

CONFIG_PATH = Path(__file__).parent.parent / "config" / "insight_rules.yaml"


def load_rules(path: Path = CONFIG_PATH) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


RULES = load_rules()


def _latest(records: Sequence[HealthMetricRecord], predicate) -> Optional[HealthMetricRecord]:
    matching = [r for r in records if predicate(r)]
    if not matching:
        return None
    return max(matching, key=lambda r: (r.date, r.created_at))


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def _bmi_insight(stats: HealthStats) -> Optional[Insight]:
    if stats.current_bmi is None:
        return None
    bmi = f"{stats.current_bmi:.1f}"
    category = stats.bmi_category
    if category == "Normal weight":
        return Insight(type="success", title="BMI Status",
                       message=f"Your BMI of {bmi} indicates a healthy weight range.")
    if category == "Overweight":
        return Insight(type="warning", title="BMI Status",
                       message=f"Your BMI of {bmi} indicates overweight. Consider consulting with a healthcare provider.")
    if category == "Underweight":
        return Insight(type="warning", title="BMI Status",
                       message=f"Your BMI of {bmi} indicates underweight. Consider consulting with a healthcare provider.")
    return Insight(type="alert", title="BMI Status",
                   message=f"Your BMI of {bmi} indicates obesity. Please consult with a healthcare provider.")


def _blood_pressure_insight(records: Sequence[HealthMetricRecord], rules: dict) -> Optional[Insight]:
    latest = _latest(records, lambda r: isinstance(r, BloodPressureRecord))
    if latest is None:
        return None
    reading = f"{_fmt(latest.systolic)}/{_fmt(latest.diastolic)}"
    alert = rules["blood_pressure"]["alert"]
    warning = rules["blood_pressure"]["warning"]
    if latest.systolic >= alert["systolic_mm_hg"] or latest.diastolic >= alert["diastolic_mm_hg"]:
        return Insight(type="alert", title="Blood Pressure",
                       message=f"Your blood pressure ({reading}) is elevated. Please consult your doctor.")
    if latest.systolic >= warning["systolic_mm_hg"] or latest.diastolic >= warning["diastolic_mm_hg"]:
        return Insight(type="warning", title="Blood Pressure",
                       message=f"Your blood pressure ({reading}) is in the elevated range.")
    return Insight(type="success", title="Blood Pressure",
                   message=f"Your blood pressure ({reading}) is in the normal range.")


def _glucose_insight(records: Sequence[HealthMetricRecord], rules: dict) -> Optional[Insight]:
    latest = _latest(records, lambda r: r.type in GLUCOSE_TYPES)
    if latest is None:
        return None
    glucose = latest.value
    thresholds = rules["glucose"]
    if glucose >= thresholds["alert_mg_dl"]:
        return Insight(type="alert", title="Blood Sugar",
                       message=f"Your glucose level ({_fmt(glucose)} mg/dL) is high. Please consult your doctor.")
    if glucose >= thresholds["warning_mg_dl"]:
        return Insight(type="warning", title="Blood Sugar",
                       message=f"Your glucose level ({_fmt(glucose)} mg/dL) is elevated.")
    if glucose >= thresholds["normal_mg_dl"]:
        return Insight(type="success", title="Blood Sugar",
                       message=f"Your glucose level ({_fmt(glucose)} mg/dL) is in the normal range.")
    # Below the normal floor there is no dashboard insight.
    return None


def _tracking_insight(records: Sequence[HealthMetricRecord], today: date, rules: dict) -> Optional[Insight]:
    if not records:
        return None
    window_start = today - timedelta(days=rules["tracking"]["window_days"])
    recent = sum(1 for r in records if r.date >= window_start)
    if recent >= rules["tracking"]["min_readings"]:
        return Insight(type="success", title="Health Tracking",
                       message=f"Great job! You've logged {recent} health measurements this week.")
    if recent == 0:
        return Insight(type="info", title="Health Tracking",
                       message="No recent measurements logged. Consider tracking your health metrics regularly.")
    return None


def generate_insights(
    records: Sequence[HealthMetricRecord],
    stats: HealthStats,
    today: date,
    rules: Optional[dict] = None,
) -> List[Insight]:
    """Build the ordered list of insights: BMI, blood pressure, glucose, tracking."""
    rules = rules or RULES
    candidates = [
        _bmi_insight(stats),
        _blood_pressure_insight(records, rules),
        _glucose_insight(records, rules),
        _tracking_insight(records, today, rules),
    ]
    return [insight for insight in candidates if insight is not None]


__all__ = ["CONFIG_PATH", "RULES", "load_rules", "generate_insights"]

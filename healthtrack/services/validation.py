"""Plausibility checks for health metric records and manual-entry forms.

``VALIDATION_BOUNDS`` is kept separate from the extraction bounds in
``patterns``; records from every source are checked against it.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from healthtrack.schemas.metrics import (
    BloodPressureReading,
    BloodPressureRecord,
    HealthMetricIn,
    HealthMetricRecord,
    LipidPanelReading,
    LipidPanelRecord,
    MetricSource,
    MetricValidationResult,
    ScalarMetricRecord,
    ScalarReading,
    build_record,
)
from healthtrack.services.identifiers import new_metric_id, utcnow
from healthtrack.services.metric_types import (
    MetricCategory,
    MetricType,
    canonical_unit,
    category_of,
    display_name,
    parse_metric_type,
)
from healthtrack.services.units import to_canonical

logger = logging.getLogger("healthtrack")

Bounds = Tuple[float, float]

VALIDATION_BOUNDS: Dict[MetricType, Bounds] = {
    MetricType.GLUCOSE: (30, 500),
    MetricType.FASTING_GLUCOSE: (30, 500),
    MetricType.RANDOM_GLUCOSE: (30, 500),
    MetricType.BLOOD_SUGAR: (30, 500),
    MetricType.HBA1C: (3, 20),
    MetricType.TOTAL_CHOLESTEROL: (50, 500),
    MetricType.HDL_CHOLESTEROL: (10, 150),
    MetricType.LDL_CHOLESTEROL: (10, 400),
    MetricType.VLDL_CHOLESTEROL: (2, 150),
    MetricType.TRIGLYCERIDES: (20, 2000),
    MetricType.TSH: (0.005, 100),
    MetricType.T3: (0.5, 50),
    MetricType.FREE_T3: (0.5, 50),
    MetricType.T4: (0.5, 30),
    MetricType.FREE_T4: (0.1, 10),
    MetricType.VITAMIN_D: (3, 200),
    MetricType.VITAMIN_B12: (50, 3000),
    MetricType.HEMOGLOBIN: (5, 20),
    MetricType.WBC: (1000, 50000),
    MetricType.PLATELETS: (10000, 1000000),
    MetricType.CREATININE: (0.3, 10),
    MetricType.UREA: (5, 200),
    MetricType.WEIGHT: (20, 300),
    MetricType.HEIGHT: (50, 250),
    MetricType.HEART_RATE: (30, 220),
    MetricType.TEMPERATURE: (30, 45),
    MetricType.BMI: (10, 60),
}
BLOOD_PRESSURE_BOUNDS: Dict[str, Bounds] = {"systolic": (70, 250), "diastolic": (40, 150)}
LIPID_PANEL_BOUNDS: Dict[str, Bounds] = {"total": (100, 400), "hdl": (20, 100), "ldl": (50, 300)}


class RejectedRecord(NamedTuple):
    record: HealthMetricRecord
    reason: str


class ValidationReport(NamedTuple):
    accepted: List[HealthMetricRecord]
    rejected: List[RejectedRecord]


def _in_bounds(value: Optional[float], bounds: Bounds) -> bool:
    return value is not None and math.isfinite(value) and bounds[0] <= value <= bounds[1]


def _fmt_bounds(bounds: Bounds) -> str:
    return f"{bounds[0]:g}-{bounds[1]:g}"


def check_record(record: HealthMetricRecord) -> Optional[str]:
    """Return a rejection reason, or ``None`` when the record is plausible."""
    if isinstance(record, BloodPressureRecord):
        for field, bounds in BLOOD_PRESSURE_BOUNDS.items():
            if not _in_bounds(getattr(record, field), bounds):
                return f"{field} outside {_fmt_bounds(bounds)} mmHg"
        return None
    if isinstance(record, LipidPanelRecord):
        present = {f: getattr(record, f) for f in LIPID_PANEL_BOUNDS if getattr(record, f) is not None}
        if not present:
            return "lipid panel has no values"
        for field, value in present.items():
            if not _in_bounds(value, LIPID_PANEL_BOUNDS[field]):
                return f"{field} outside {_fmt_bounds(LIPID_PANEL_BOUNDS[field])} mg/dL"
        return None
    if isinstance(record, ScalarMetricRecord):
        bounds = VALIDATION_BOUNDS.get(record.type)
        if bounds is None:
            return None if math.isfinite(record.value) else "value is not finite"
        if not _in_bounds(record.value, bounds):
            return f"value outside {_fmt_bounds(bounds)} {canonical_unit(record.type)}".rstrip()
        return None
    return "unsupported record"


def screen_health_data(
    candidates: Iterable[HealthMetricRecord],
    *,
    id_source: Callable[[], str] = new_metric_id,
) -> ValidationReport:
    """Split candidates into accepted (with fresh ids) and rejected records."""
    accepted: List[HealthMetricRecord] = []
    rejected: List[RejectedRecord] = []
    for record in candidates:
        reason = check_record(record)
        if reason:
            rejected.append(RejectedRecord(record, reason))
            logger.info({
                "function": "screen_health_data",
                "status": "rejected",
                "type": record.type.value,
                "reason": reason,
            })
            continue
        accepted.append(record.model_copy(update={"id": id_source()}))
    return ValidationReport(accepted, rejected)


def validate_health_data(
    candidates: Iterable[HealthMetricRecord],
    *,
    id_source: Callable[[], str] = new_metric_id,
) -> List[HealthMetricRecord]:
    """Return the plausible candidates with fresh ids; implausible ones are dropped."""
    return screen_health_data(candidates, id_source=id_source).accepted


# ---------- Manual entry ----------
def _as_form(form: Union[HealthMetricIn, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(form, HealthMetricIn):
        return form.model_dump()
    return dict(form or {})


def _parse_number(raw: Any) -> Optional[float]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        number = float(str(raw).replace(",", "").strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_date(raw: Any) -> Optional[date]:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _field_value(form: Dict[str, Any], metric_type: MetricType, field: str) -> Optional[float]:
    number = _parse_number(form.get(field))
    if number is None:
        return None
    return to_canonical(metric_type, number, form.get("unit"))


def validate_health_metric(form: Union[HealthMetricIn, Mapping[str, Any]]) -> MetricValidationResult:
    """Validate a manual-entry form and return a field-level error map (never raises)."""
    data = _as_form(form)
    errors: Dict[str, str] = {}

    metric_type = parse_metric_type(data.get("type"))
    if not data.get("type"):
        errors["type"] = "Metric type is required"
    elif metric_type is None:
        errors["type"] = "Invalid metric type"

    if not data.get("date"):
        errors["date"] = "Date is required"
    elif _parse_date(data.get("date")) is None:
        errors["date"] = "Date must be an ISO date (YYYY-MM-DD)"

    if metric_type is None:
        return MetricValidationResult(is_valid=not errors, errors=errors)

    category = category_of(metric_type)
    if category is MetricCategory.BLOOD_PRESSURE:
        for field, bounds in BLOOD_PRESSURE_BOUNDS.items():
            if not _in_bounds(_parse_number(data.get(field)), bounds):
                errors[field] = f"Valid {field} pressure ({_fmt_bounds(bounds)}) is required"
    elif category is MetricCategory.LIPID_PANEL:
        for field, bounds in LIPID_PANEL_BOUNDS.items():
            value = _field_value(data, metric_type, field)
            required = field == "total"
            if value is None and not required and data.get(field) in (None, ""):
                continue
            if not _in_bounds(value, bounds):
                label = "total cholesterol" if field == "total" else f"{field.upper()} cholesterol"
                errors[field] = f"Valid {label} ({_fmt_bounds(bounds)} mg/dL) is required"
    else:
        bounds = VALIDATION_BOUNDS.get(metric_type)
        value = _field_value(data, metric_type, "value")
        if bounds is not None and not _in_bounds(value, bounds):
            unit = canonical_unit(metric_type)
            label = display_name(metric_type)
            errors["value"] = f"Valid {label} ({_fmt_bounds(bounds)} {unit}) is required"
        elif value is None:
            errors["value"] = f"Valid {display_name(metric_type)} is required"

    return MetricValidationResult(is_valid=not errors, errors=errors)


def build_manual_record(
    form: Union[HealthMetricIn, Mapping[str, Any]],
    *,
    record_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
    clock: Callable[[], datetime] = utcnow,
) -> HealthMetricRecord:
    """Turn a form that passed ``validate_health_metric`` into a typed record.

    Edits pass the stored ``record_id`` and ``created_at`` so the replacement
    keeps them.
    """
    data = _as_form(form)
    result = validate_health_metric(data)
    if not result.is_valid:
        raise ValueError(f"invalid health metric: {result.errors}")
    metric_type = parse_metric_type(data["type"])
    unit = canonical_unit(metric_type)
    category = category_of(metric_type)
    if category is MetricCategory.BLOOD_PRESSURE:
        reading = BloodPressureReading(
            systolic=_parse_number(data["systolic"]),
            diastolic=_parse_number(data["diastolic"]),
        )
    elif category is MetricCategory.LIPID_PANEL:
        reading = LipidPanelReading(
            total=_field_value(data, metric_type, "total"),
            hdl=_field_value(data, metric_type, "hdl"),
            ldl=_field_value(data, metric_type, "ldl"),
        )
    else:
        reading = ScalarReading(value=_field_value(data, metric_type, "value"), unit=unit)
    return build_record(
        metric_type,
        reading,
        date=_parse_date(data["date"]),
        source=MetricSource.MANUAL,
        created_at=created_at or clock(),
        notes=data.get("notes") or None,
        record_id=record_id or new_metric_id(),
    )


__all__ = [
    "VALIDATION_BOUNDS",
    "BLOOD_PRESSURE_BOUNDS",
    "LIPID_PANEL_BOUNDS",
    "RejectedRecord",
    "ValidationReport",
    "check_record",
    "screen_health_data",
    "validate_health_data",
    "validate_health_metric",
    "build_manual_record",
]

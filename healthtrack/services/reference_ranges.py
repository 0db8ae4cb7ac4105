"""Clinical reference ranges used for status display.

These ranges never decide whether a value is accepted; a glucose of 280 is
stored and flagged ``High``. Acceptance uses the wider plausibility bounds in
``healthtrack.services.validation``.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Union

from healthtrack.schemas.reference import (
    AnyRange,
    BloodPressureRange,
    LipidPanelRange,
    ReferenceRange,
)
from healthtrack.services.metric_types import MetricType, parse_metric_type


def _between(lo: float, hi: float, unit: str, **flags) -> ReferenceRange:
    return ReferenceRange(min=lo, max=hi, unit=unit, **flags)


_TOTAL_CHOLESTEROL = _between(0, 200, "mg/dL")
_HDL = ReferenceRange(min=40, unit="mg/dL", higher_is_better=True)
_LDL = _between(0, 100, "mg/dL")

REFERENCE_RANGES: Mapping[MetricType, AnyRange] = MappingProxyType({
    # Glucose & diabetes
    MetricType.GLUCOSE: _between(70, 100, "mg/dL", fasting_required=True),
    MetricType.FASTING_GLUCOSE: _between(70, 100, "mg/dL", fasting_required=True),
    MetricType.RANDOM_GLUCOSE: _between(70, 140, "mg/dL"),
    MetricType.BLOOD_SUGAR: _between(70, 100, "mg/dL"),
    MetricType.HBA1C: _between(4.0, 5.6, "%"),
    # Lipid profile
    MetricType.TOTAL_CHOLESTEROL: _TOTAL_CHOLESTEROL,
    MetricType.HDL_CHOLESTEROL: _HDL,
    MetricType.LDL_CHOLESTEROL: _LDL,
    MetricType.VLDL_CHOLESTEROL: _between(5, 30, "mg/dL"),
    MetricType.TRIGLYCERIDES: _between(0, 150, "mg/dL"),
    MetricType.CHOLESTEROL: LipidPanelRange(total=_TOTAL_CHOLESTEROL, hdl=_HDL, ldl=_LDL),
    # Thyroid
    MetricType.TSH: _between(0.27, 4.2, "mIU/L"),
    MetricType.T3: _between(2.3, 4.2, "pg/mL"),
    MetricType.FREE_T3: _between(2.0, 4.4, "pg/mL"),
    MetricType.T4: _between(4.5, 12.0, "µg/dL"),
    MetricType.FREE_T4: _between(0.8, 1.8, "ng/dL"),
    # Vitamins
    MetricType.VITAMIN_D: _between(30, 100, "ng/mL"),
    MetricType.VITAMIN_B12: _between(300, 900, "pg/mL"),
    # CBC
    MetricType.HEMOGLOBIN: _between(12.0, 15.5, "g/dL"),
    MetricType.WBC: _between(4000, 11000, "/µL"),
    MetricType.PLATELETS: _between(150000, 450000, "/µL"),
    # Kidney function
    MetricType.CREATININE: _between(0.6, 1.3, "mg/dL"),
    MetricType.UREA: _between(7, 20, "mg/dL"),
    # Vitals
    MetricType.BLOOD_PRESSURE: BloodPressureRange(
        systolic=_between(90, 120, "mmHg"),
        diastolic=_between(60, 80, "mmHg"),
    ),
    MetricType.HEART_RATE: _between(60, 100, "bpm"),
    MetricType.TEMPERATURE: _between(36.1, 37.2, "°C"),
    MetricType.BMI: _between(18.5, 24.9, "kg/m²"),
})


def lookup(metric_type: Union[MetricType, str]) -> Optional[AnyRange]:
    """Return the reference range for ``metric_type`` or ``None`` (weight, height, unknown tags)."""
    parsed = parse_metric_type(metric_type)
    if parsed is None:
        return None
    return REFERENCE_RANGES.get(parsed)


__all__ = ["REFERENCE_RANGES", "lookup"]

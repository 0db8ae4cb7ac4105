"""Status classification of a record against its clinical reference range.

Single-valued metrics resolve to Normal/Low/High. Composite readings (blood
pressure, lipid panel) follow one rule: Normal only when every present
sub-value is inside its own range, otherwise Abnormal.
"""
from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

from healthtrack.schemas.metrics import (
    BloodPressureRecord,
    HealthMetricRecord,
    LipidPanelRecord,
    MetricStatus,
    ScalarMetricRecord,
)
from healthtrack.schemas.reference import (
    AnyRange,
    BloodPressureRange,
    LipidPanelRange,
    ReferenceRange,
)
from healthtrack.services.reference_ranges import lookup


def classify_value(value: Optional[float], rng: ReferenceRange) -> MetricStatus:
    if value is None or not math.isfinite(value):
        return MetricStatus.UNKNOWN
    if rng.higher_is_better:
        if rng.min is None or value >= rng.min:
            return MetricStatus.NORMAL
        return MetricStatus.LOW
    if rng.min is not None and value < rng.min:
        return MetricStatus.LOW
    if rng.max is not None and value > rng.max:
        return MetricStatus.HIGH
    return MetricStatus.NORMAL


def _composite(parts: Iterable[Tuple[Optional[float], ReferenceRange]]) -> MetricStatus:
    statuses = [classify_value(value, rng) for value, rng in parts if value is not None]
    if not statuses or MetricStatus.UNKNOWN in statuses:
        return MetricStatus.UNKNOWN
    if all(s is MetricStatus.NORMAL for s in statuses):
        return MetricStatus.NORMAL
    return MetricStatus.ABNORMAL


def classify(record: HealthMetricRecord, rng: Optional[AnyRange] = None) -> MetricStatus:
    """Return the record's status; ``Unknown`` when no range applies."""
    if rng is None:
        rng = lookup(record.type)
    if rng is None:
        return MetricStatus.UNKNOWN
    if isinstance(record, BloodPressureRecord) and isinstance(rng, BloodPressureRange):
        return _composite([(record.systolic, rng.systolic), (record.diastolic, rng.diastolic)])
    if isinstance(record, LipidPanelRecord) and isinstance(rng, LipidPanelRange):
        return _composite([(record.total, rng.total), (record.hdl, rng.hdl), (record.ldl, rng.ldl)])
    if isinstance(record, ScalarMetricRecord) and isinstance(rng, ReferenceRange):
        return classify_value(record.value, rng)
    return MetricStatus.UNKNOWN


__all__ = ["classify", "classify_value"]

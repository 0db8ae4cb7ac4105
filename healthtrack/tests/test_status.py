from datetime import date, datetime, timezone

import pytest

from healthtrack.schemas.metrics import (
    BloodPressureReading,
    LipidPanelReading,
    MetricSource,
    MetricStatus,
    ScalarReading,
    build_record,
)
from healthtrack.schemas.reference import ReferenceRange
from healthtrack.services.metric_types import MetricCategory, MetricType, category_of
from healthtrack.services.reference_ranges import REFERENCE_RANGES
from healthtrack.services.status import classify, classify_value

NOW = datetime(2024, 3, 15, tzinfo=timezone.utc)


def _record(metric_type, reading):
    return build_record(
        metric_type, reading, date=date(2024, 3, 15), source=MetricSource.MANUAL, created_at=NOW, record_id="x"
    )


def _scalar(metric_type, value):
    return _record(metric_type, ScalarReading(value=value, unit=""))


def test_scalar_low_normal_high():
    assert classify(_scalar(MetricType.GLUCOSE, 60)) is MetricStatus.LOW
    assert classify(_scalar(MetricType.GLUCOSE, 85)) is MetricStatus.NORMAL
    assert classify(_scalar(MetricType.GLUCOSE, 150)) is MetricStatus.HIGH


def test_range_bounds_are_inclusive():
    assert classify(_scalar(MetricType.LDL_CHOLESTEROL, 100)) is MetricStatus.NORMAL
    assert classify(_scalar(MetricType.GLUCOSE, 70)) is MetricStatus.NORMAL


def test_hdl_higher_is_better():
    assert classify(_scalar(MetricType.HDL_CHOLESTEROL, 35)) is MetricStatus.LOW
    assert classify(_scalar(MetricType.HDL_CHOLESTEROL, 95)) is MetricStatus.NORMAL


def test_blood_pressure_is_composite():
    normal = _record(MetricType.BLOOD_PRESSURE, BloodPressureReading(systolic=115, diastolic=75))
    raised = _record(MetricType.BLOOD_PRESSURE, BloodPressureReading(systolic=125, diastolic=82))
    assert classify(normal) is MetricStatus.NORMAL
    assert classify(raised) is MetricStatus.ABNORMAL


def test_lipid_panel_is_composite():
    normal = _record(MetricType.CHOLESTEROL, LipidPanelReading(total=180, hdl=45, ldl=90))
    raised = _record(MetricType.CHOLESTEROL, LipidPanelReading(total=180, hdl=45, ldl=130))
    assert classify(normal) is MetricStatus.NORMAL
    assert classify(raised) is MetricStatus.ABNORMAL


def test_missing_range_is_unknown():
    assert classify(_scalar(MetricType.WEIGHT, 70)) is MetricStatus.UNKNOWN
    assert classify(_scalar(MetricType.HEIGHT, 170)) is MetricStatus.UNKNOWN


def test_classification_is_deterministic():
    record = _scalar(MetricType.TSH, 5.0)
    assert classify(record) is classify(record) is MetricStatus.HIGH


def test_explicit_range_overrides_table():
    rng = ReferenceRange(min=10, max=20)
    assert classify(_scalar(MetricType.WEIGHT, 25), rng) is MetricStatus.HIGH
    assert classify_value(None, rng) is MetricStatus.UNKNOWN


def _record_for(metric_type, value):
    category = category_of(metric_type)
    if category is MetricCategory.BLOOD_PRESSURE:
        return _record(metric_type, BloodPressureReading(systolic=value, diastolic=value))
    if category is MetricCategory.LIPID_PANEL:
        return _record(metric_type, LipidPanelReading(total=value, hdl=value, ldl=value))
    return _scalar(metric_type, value)


@pytest.mark.parametrize("metric_type", sorted(REFERENCE_RANGES, key=lambda t: t.value))
def test_every_ranged_type_classifies_to_one_stable_status(metric_type):
    rng = REFERENCE_RANGES[metric_type]
    values = [-1e12, -1.0, 0.0, 1.0, 1e12]
    if isinstance(rng, ReferenceRange):
        values += [v for v in (rng.min, rng.max) if v is not None]
        allowed = {MetricStatus.NORMAL, MetricStatus.LOW, MetricStatus.HIGH}
    else:
        allowed = {MetricStatus.NORMAL, MetricStatus.ABNORMAL}
    for value in values:
        record = _record_for(metric_type, value)
        status = classify(record)
        assert status in allowed, (metric_type, value, status)
        assert classify(record) is status


@pytest.mark.parametrize(
    "metric_type",
    sorted((t for t, r in REFERENCE_RANGES.items() if isinstance(r, ReferenceRange)), key=lambda t: t.value),
)
def test_range_edges_are_normal(metric_type):
    rng = REFERENCE_RANGES[metric_type]
    for edge in (rng.min, rng.max):
        if edge is not None:
            assert classify(_scalar(metric_type, edge)) is MetricStatus.NORMAL

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from healthtrack.schemas.metrics import (
    BloodPressureReading,
    LipidPanelReading,
    MetricSource,
    ScalarMetricRecord,
    ScalarReading,
    build_record,
)
from healthtrack.services.metric_types import (
    MetricCategory,
    MetricType,
    canonical_unit,
    category_of,
    display_name,
    format_metric_value,
    parse_metric_type,
)

NOW = datetime(2024, 3, 15, tzinfo=timezone.utc)


def test_parse_known_and_unknown_tags():
    assert parse_metric_type("freeT4") is MetricType.FREE_T4
    assert parse_metric_type("bloodSugar") is MetricType.BLOOD_SUGAR
    assert parse_metric_type("sugarLevel") is None
    assert parse_metric_type("") is None


def test_display_names():
    assert display_name(MetricType.HBA1C) == "HbA1c"
    assert display_name("vitaminB12") == "Vitamin B12"
    assert display_name("someNewMetric") == "Some New Metric"


def test_units_and_categories():
    assert canonical_unit("wbc") == "/µL"
    assert canonical_unit("unknownTag") == ""
    assert category_of("bloodPressure") is MetricCategory.BLOOD_PRESSURE
    assert category_of("cholesterol") is MetricCategory.LIPID_PANEL
    assert category_of("tsh") is MetricCategory.SCALAR


def test_record_kind_must_match_type():
    with pytest.raises(ValidationError):
        ScalarMetricRecord(
            type=MetricType.BLOOD_PRESSURE,
            value=120,
            date=date(2024, 3, 15),
            unit="mmHg",
            source=MetricSource.MANUAL,
            created_at=NOW,
        )


def test_records_are_immutable():
    record = build_record(
        MetricType.GLUCOSE,
        ScalarReading(value=90, unit="mg/dL"),
        date=date(2024, 3, 15),
        source=MetricSource.MANUAL,
        created_at=NOW,
    )
    with pytest.raises(ValidationError):
        record.value = 100


def test_format_metric_value():
    kwargs = dict(date=date(2024, 3, 15), source=MetricSource.MANUAL, created_at=NOW)
    bp = build_record(MetricType.BLOOD_PRESSURE, BloodPressureReading(systolic=125, diastolic=82), **kwargs)
    panel = build_record(MetricType.CHOLESTEROL, LipidPanelReading(total=190, hdl=50), **kwargs)
    wbc = build_record(MetricType.WBC, ScalarReading(value=7500, unit="/µL"), **kwargs)
    temp = build_record(MetricType.TEMPERATURE, ScalarReading(value=36.8, unit="°C"), **kwargs)
    glucose = build_record(MetricType.GLUCOSE, ScalarReading(value=92.5, unit="mg/dL"), **kwargs)
    assert format_metric_value(bp) == "125/82"
    assert format_metric_value(panel) == "190 mg/dL"
    assert format_metric_value(wbc) == "7,500 /µL"
    assert format_metric_value(temp) == "36.8°C"
    assert format_metric_value(glucose) == "92.5 mg/dL"

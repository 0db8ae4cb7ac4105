from datetime import date, datetime, timezone

import pytest

from healthtrack.schemas.metrics import MetricSource, MetricStatus
from healthtrack.services.extraction import extract_health_data
from healthtrack.services.metric_types import MetricType, canonical_unit
from healthtrack.services.status import classify

NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


def clock():
    return NOW


def _by_type(records):
    return {r.type: r for r in records}


def test_fasting_glucose_does_not_duplicate_generic_glucose():
    records = extract_health_data("fasting glucose: 92 mg/dl", clock=clock)
    assert [r.type for r in records] == [MetricType.FASTING_GLUCOSE]
    assert records[0].value == 92
    assert records[0].unit == "mg/dL"


def test_blood_pressure_reading_is_one_composite_record():
    records = extract_health_data("Blood Pressure: 125/82 mmHg", clock=clock)
    assert len(records) == 1
    bp = records[0]
    assert bp.type is MetricType.BLOOD_PRESSURE
    assert (bp.systolic, bp.diastolic) == (125, 82)
    assert classify(bp) is MetricStatus.ABNORMAL


def test_text_without_keywords_yields_nothing():
    assert extract_health_data("Patient feels well. Follow up in two weeks.", clock=clock) == []


def test_empty_text_yields_nothing():
    assert extract_health_data("   ", clock=clock) == []


def test_records_default_to_today_when_no_date_present():
    records = extract_health_data("TSH: 2.5 mIU/L\nVitamin D: 35 ng/mL", clock=clock)
    found = _by_type(records)
    assert set(found) == {MetricType.TSH, MetricType.VITAMIN_D}
    assert found[MetricType.TSH].value == 2.5
    assert found[MetricType.VITAMIN_D].value == 35
    assert all(r.date == NOW.date() for r in records)


def test_report_date_is_taken_from_text():
    records = extract_health_data("Report Date: 03/10/2024\nHemoglobin: 13.5 g/dL", clock=clock)
    assert len(records) == 1
    assert records[0].type is MetricType.HEMOGLOBIN
    assert records[0].date == date(2024, 3, 10)


def test_candidates_carry_provenance_but_no_id():
    records = extract_health_data("Hemoglobin: 13.5 g/dL", "lab.pdf", clock=clock)
    record = records[0]
    assert record.id is None
    assert record.source is MetricSource.PDF_EXTRACTION
    assert record.notes == "Extracted from lab.pdf"
    assert record.created_at == NOW


def test_note_without_file_name():
    records = extract_health_data("Hemoglobin: 13.5 g/dL", clock=clock)
    assert records[0].notes == "Extracted from report text"


def test_free_t4_is_not_read_as_total_t4():
    found = _by_type(extract_health_data("Free T4: 1.2 ng/dL", clock=clock))
    assert set(found) == {MetricType.FREE_T4}
    assert found[MetricType.FREE_T4].value == 1.2


def test_total_t4_alone():
    found = _by_type(extract_health_data("T4: 8.1 ug/dL", clock=clock))
    assert set(found) == {MetricType.T4}


def test_glucose_in_mmol_is_converted():
    found = _by_type(extract_health_data("Glucose: 5.5 mmol/L", clock=clock))
    assert found[MetricType.GLUCOSE].value == pytest.approx(99.09)


def test_fahrenheit_temperature_is_converted_to_celsius():
    found = _by_type(extract_health_data("Temperature: 98.6 F", clock=clock))
    assert found[MetricType.TEMPERATURE].value == pytest.approx(37.0)
    assert found[MetricType.TEMPERATURE].unit == "°C"


def test_weight_in_pounds_is_converted():
    found = _by_type(extract_health_data("Weight: 154 lbs", clock=clock))
    assert found[MetricType.WEIGHT].value == pytest.approx(69.85)


def test_heart_rate():
    found = _by_type(extract_health_data("Pulse: 72 bpm", clock=clock))
    assert found[MetricType.HEART_RATE].value == 72


def test_implausible_value_is_not_extracted():
    # 2024 reads as a year, far outside the hemoglobin bounds
    assert extract_health_data("Hemoglobin 2024", clock=clock) == []


def test_lipid_profile_yields_panel_and_individual_values():
    text = (
        "Lipid Profile\n"
        "Total Cholesterol: 180 mg/dL\n"
        "HDL Cholesterol: 45 mg/dL\n"
        "LDL Cholesterol: 110 mg/dL\n"
        "Triglycerides: 140 mg/dL\n"
    )
    found = _by_type(extract_health_data(text, clock=clock))
    assert set(found) == {
        MetricType.CHOLESTEROL,
        MetricType.TOTAL_CHOLESTEROL,
        MetricType.HDL_CHOLESTEROL,
        MetricType.LDL_CHOLESTEROL,
        MetricType.TRIGLYCERIDES,
    }
    panel = found[MetricType.CHOLESTEROL]
    assert (panel.total, panel.hdl, panel.ldl) == (180, 45, 110)
    assert found[MetricType.HDL_CHOLESTEROL].value == 45
    assert found[MetricType.LDL_CHOLESTEROL].value == 110


def test_cholesterol_in_mmol_is_converted():
    found = _by_type(extract_health_data("Total Cholesterol: 5.2 mmol/L", clock=clock))
    assert found[MetricType.TOTAL_CHOLESTEROL].value == pytest.approx(201.08)


def test_at_most_one_record_per_type():
    text = "Hemoglobin: 13.5 g/dL\nHemoglobin: 14.1 g/dL"
    records = extract_health_data(text, clock=clock)
    assert [r.type for r in records] == [MetricType.HEMOGLOBIN]
    assert records[0].value == 13.5


def test_report_text_with_commas_and_no_colons():
    records = extract_health_data("TSH 2.1 mIU/L, Vitamin D 32 ng/mL", clock=clock)
    found = _by_type(records)
    assert set(found) == {MetricType.TSH, MetricType.VITAMIN_D}
    assert found[MetricType.TSH].value == 2.1
    assert found[MetricType.VITAMIN_D].value == 32
    assert {r.date for r in records} == {NOW.date()}


def test_mixed_case_input():
    records = extract_health_data("Fasting Glucose: 92 mg/dL", clock=clock)
    assert [(r.type, r.value, r.unit) for r in records] == [(MetricType.FASTING_GLUCOSE, 92, "mg/dL")]


def test_hemoglobin_and_hba1c_are_kept_apart():
    found = _by_type(extract_health_data("Hemoglobin: 13.5 g/dL\nHbA1c: 6.1 %", clock=clock))
    assert set(found) == {MetricType.HEMOGLOBIN, MetricType.HBA1C}
    assert found[MetricType.HEMOGLOBIN].value == 13.5
    assert found[MetricType.HBA1C].value == 6.1


def test_glycated_hemoglobin_is_only_hba1c():
    records = extract_health_data("Glycated Hemoglobin: 6.4 %", clock=clock)
    assert [(r.type, r.value) for r in records] == [(MetricType.HBA1C, 6.4)]


def test_free_t3_is_not_read_as_total_t3():
    records = extract_health_data("Free T3: 3.1 pg/mL", clock=clock)
    assert [(r.type, r.value) for r in records] == [(MetricType.FREE_T3, 3.1)]

    found = _by_type(extract_health_data("Free T3: 3.1 pg/mL\nT3: 2.9 pg/mL", clock=clock))
    assert found[MetricType.FREE_T3].value == 3.1
    assert found[MetricType.T3].value == 2.9


def test_ldl_and_vldl_are_kept_apart():
    records = extract_health_data("VLDL: 25 mg/dL", clock=clock)
    assert [(r.type, r.value) for r in records] == [(MetricType.VLDL_CHOLESTEROL, 25)]

    found = _by_type(extract_health_data("LDL: 110 mg/dL\nVLDL: 25 mg/dL", clock=clock))
    assert set(found) == {MetricType.LDL_CHOLESTEROL, MetricType.VLDL_CHOLESTEROL}
    assert found[MetricType.LDL_CHOLESTEROL].value == 110


def test_non_hdl_cholesterol_is_not_hdl_or_total():
    found = _by_type(extract_health_data("Non-HDL Cholesterol: 150 mg/dL\nHDL: 50 mg/dL", clock=clock))
    assert found[MetricType.HDL_CHOLESTEROL].value == 50
    assert MetricType.TOTAL_CHOLESTEROL not in found


@pytest.mark.parametrize(
    "text, metric_type, expected",
    [
        ("WBC: 7.5 x10^3/µL", MetricType.WBC, 7500),
        ("WBC: 6.8 x 10^9/L", MetricType.WBC, 6800),
        ("Platelets: 2.5 lakh/cumm", MetricType.PLATELETS, 250000),
        ("Platelets: 250 10^9/L", MetricType.PLATELETS, 250000),
        ("Creatinine: 88.4 µmol/L", MetricType.CREATININE, 1.0),
        ("Vitamin D: 75 nmol/L", MetricType.VITAMIN_D, 30.05),
        ("Vitamin B12: 300 pmol/L", MetricType.VITAMIN_B12, 406.5),
    ],
)
def test_alternate_units_are_converted(text, metric_type, expected):
    found = _by_type(extract_health_data(text, clock=clock))
    assert found[metric_type].value == pytest.approx(expected)
    assert found[metric_type].unit == canonical_unit(metric_type)

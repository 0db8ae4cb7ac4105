"""Registry of supported health metric types, their labels and canonical units."""
from __future__ import annotations

import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional, Union


class MetricType(str, Enum):
    GLUCOSE = "glucose"
    FASTING_GLUCOSE = "fastingGlucose"
    RANDOM_GLUCOSE = "randomGlucose"
    HBA1C = "hba1c"
    TOTAL_CHOLESTEROL = "totalCholesterol"
    HDL_CHOLESTEROL = "hdlCholesterol"
    LDL_CHOLESTEROL = "ldlCholesterol"
    VLDL_CHOLESTEROL = "vldlCholesterol"
    TRIGLYCERIDES = "triglycerides"
    TSH = "tsh"
    T3 = "t3"
    FREE_T3 = "freeT3"
    T4 = "t4"
    FREE_T4 = "freeT4"
    VITAMIN_D = "vitaminD"
    VITAMIN_B12 = "vitaminB12"
    HEMOGLOBIN = "hemoglobin"
    WBC = "wbc"
    PLATELETS = "platelets"
    CREATININE = "creatinine"
    UREA = "urea"
    BLOOD_PRESSURE = "bloodPressure"
    WEIGHT = "weight"
    HEIGHT = "height"
    HEART_RATE = "heartRate"
    TEMPERATURE = "temperature"
    BMI = "bmi"
    # legacy aliases kept for records created by older clients
    BLOOD_SUGAR = "bloodSugar"
    CHOLESTEROL = "cholesterol"


class MetricCategory(str, Enum):
    SCALAR = "scalar"
    BLOOD_PRESSURE = "blood_pressure"
    LIPID_PANEL = "lipid_panel"


class MetricInfo(NamedTuple):
    display_name: str
    unit: str
    category: MetricCategory = MetricCategory.SCALAR


METRIC_INFO: Mapping[MetricType, MetricInfo] = MappingProxyType({
    MetricType.GLUCOSE: MetricInfo("Glucose", "mg/dL"),
    MetricType.FASTING_GLUCOSE: MetricInfo("Fasting Glucose", "mg/dL"),
    MetricType.RANDOM_GLUCOSE: MetricInfo("Random Glucose", "mg/dL"),
    MetricType.HBA1C: MetricInfo("HbA1c", "%"),
    MetricType.TOTAL_CHOLESTEROL: MetricInfo("Total Cholesterol", "mg/dL"),
    MetricType.HDL_CHOLESTEROL: MetricInfo("HDL Cholesterol", "mg/dL"),
    MetricType.LDL_CHOLESTEROL: MetricInfo("LDL Cholesterol", "mg/dL"),
    MetricType.VLDL_CHOLESTEROL: MetricInfo("VLDL Cholesterol", "mg/dL"),
    MetricType.TRIGLYCERIDES: MetricInfo("Triglycerides", "mg/dL"),
    MetricType.TSH: MetricInfo("TSH", "mIU/L"),
    MetricType.T3: MetricInfo("T3", "pg/mL"),
    MetricType.FREE_T3: MetricInfo("Free T3", "pg/mL"),
    MetricType.T4: MetricInfo("T4", "µg/dL"),
    MetricType.FREE_T4: MetricInfo("Free T4", "ng/dL"),
    MetricType.VITAMIN_D: MetricInfo("Vitamin D", "ng/mL"),
    MetricType.VITAMIN_B12: MetricInfo("Vitamin B12", "pg/mL"),
    MetricType.HEMOGLOBIN: MetricInfo("Hemoglobin", "g/dL"),
    MetricType.WBC: MetricInfo("White Blood Cells", "/µL"),
    MetricType.PLATELETS: MetricInfo("Platelets", "/µL"),
    MetricType.CREATININE: MetricInfo("Creatinine", "mg/dL"),
    MetricType.UREA: MetricInfo("Urea", "mg/dL"),
    MetricType.BLOOD_PRESSURE: MetricInfo("Blood Pressure", "mmHg", MetricCategory.BLOOD_PRESSURE),
    MetricType.WEIGHT: MetricInfo("Weight", "kg"),
    MetricType.HEIGHT: MetricInfo("Height", "cm"),
    MetricType.HEART_RATE: MetricInfo("Heart Rate", "bpm"),
    MetricType.TEMPERATURE: MetricInfo("Temperature", "°C"),
    MetricType.BMI: MetricInfo("BMI", "kg/m²"),
    MetricType.BLOOD_SUGAR: MetricInfo("Blood Sugar", "mg/dL"),
    MetricType.CHOLESTEROL: MetricInfo("Cholesterol", "mg/dL", MetricCategory.LIPID_PANEL),
})

GLUCOSE_TYPES = frozenset({
    MetricType.GLUCOSE,
    MetricType.FASTING_GLUCOSE,
    MetricType.RANDOM_GLUCOSE,
    MetricType.BLOOD_SUGAR,
})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def parse_metric_type(tag: Union[MetricType, str, None]) -> Optional[MetricType]:
    """Return the enum member for ``tag`` or ``None`` when it is not a known type."""
    if isinstance(tag, MetricType):
        return tag
    if not tag:
        return None
    try:
        return MetricType(str(tag).strip())
    except ValueError:
        return None


def _fallback_label(tag: str) -> str:
    words = _CAMEL_BOUNDARY.sub(" ", tag.strip()).replace("_", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def display_name(tag: Union[MetricType, str]) -> str:
    metric_type = parse_metric_type(tag)
    if metric_type is None:
        return _fallback_label(str(tag or ""))
    return METRIC_INFO[metric_type].display_name


def canonical_unit(tag: Union[MetricType, str]) -> str:
    metric_type = parse_metric_type(tag)
    if metric_type is None:
        return ""
    return METRIC_INFO[metric_type].unit


def category_of(tag: Union[MetricType, str]) -> MetricCategory:
    metric_type = parse_metric_type(tag)
    if metric_type is None:
        return MetricCategory.SCALAR
    return METRIC_INFO[metric_type].category


def _fmt_number(value: Any) -> str:
    if value is None:
        return "?"
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def format_metric_value(record: Any) -> str:
    """Render a record's value the way the dashboard shows it."""
    metric_type = parse_metric_type(getattr(record, "type", None))
    if metric_type is MetricType.BLOOD_PRESSURE:
        return f"{_fmt_number(record.systolic)}/{_fmt_number(record.diastolic)}"
    if metric_type is MetricType.CHOLESTEROL:
        return f"{_fmt_number(record.total)} mg/dL"
    value = getattr(record, "value", None)
    if metric_type in (MetricType.WBC, MetricType.PLATELETS) and value is not None:
        return f"{int(round(float(value))):,} /µL"
    if metric_type is MetricType.TEMPERATURE:
        return f"{_fmt_number(value)}°C"
    if metric_type is MetricType.BMI:
        return _fmt_number(value)
    unit = canonical_unit(metric_type) if metric_type else ""
    return f"{_fmt_number(value)} {unit}".strip()


__all__ = [
    "MetricType",
    "MetricCategory",
    "MetricInfo",
    "METRIC_INFO",
    "GLUCOSE_TYPES",
    "parse_metric_type",
    "display_name",
    "canonical_unit",
    "category_of",
    "format_metric_value",
]

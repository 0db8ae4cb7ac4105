"""Unit spelling cleanup and conversion to each metric's canonical unit."""
from __future__ import annotations

import re
from typing import Callable, Dict, Optional, Union

from healthtrack.services.metric_types import GLUCOSE_TYPES, MetricType

Converter = Union[float, Callable[[float], float]]

_MICRO = re.compile(r"[µμ]")


def normalize_unit_text(unit: Optional[str]) -> str:
    if not unit:
        return ""
    cleaned = unit.strip().lower().replace(" ", "")
    cleaned = _MICRO.sub("u", cleaned)
    cleaned = cleaned.replace("gm/", "g/").replace("perul", "/ul").replace("per", "/")
    cleaned = cleaned.replace("micromol", "umol").replace("cumm", "ul").replace("mm3", "ul")
    cleaned = cleaned.replace("cells/", "/").replace("×", "x").replace("*", "x")
    cleaned = cleaned.replace("º", "°").replace("degrees", "°").replace("deg", "°")
    cleaned = cleaned.replace("celsius", "°c").replace("fahrenheit", "°f")
    cleaned = re.sub(r"^x?10\^?3/ul$", "x10^3/ul", cleaned)
    cleaned = re.sub(r"^x?10\^?9/l$", "x10^3/ul", cleaned)
    cleaned = re.sub(r"^(?:k/ul|thou/ul|thousand/ul)$", "x10^3/ul", cleaned)
    cleaned = re.sub(r"^lakhs?(?:/ul)?$", "lakh", cleaned)
    cleaned = re.sub(r"^kgs?$|^kilograms?$", "kg", cleaned)
    cleaned = re.sub(r"^lbs?$|^pounds?$", "lb", cleaned)
    cleaned = re.sub(r"^cms?$|^centimet(?:er|re)s?$", "cm", cleaned)
    cleaned = re.sub(r"^(?:in|inch|inches)$", "in", cleaned)
    cleaned = re.sub(r"^(?:m|met(?:er|re)s?)$", "m", cleaned)
    if cleaned in ("c", "f"):
        cleaned = "°" + cleaned
    return cleaned


def _f_to_c(value: float) -> float:
    return (value - 32) * 5 / 9


_CELL_COUNT: Dict[str, Converter] = {"x10^3/ul": 1000.0, "lakh": 100000.0}
_CHOLESTEROL: Dict[str, Converter] = {"mmol/l": 38.67}

_CONVERSIONS: Dict[MetricType, Dict[str, Converter]] = {
    MetricType.TOTAL_CHOLESTEROL: _CHOLESTEROL,
    MetricType.HDL_CHOLESTEROL: _CHOLESTEROL,
    MetricType.LDL_CHOLESTEROL: _CHOLESTEROL,
    MetricType.VLDL_CHOLESTEROL: _CHOLESTEROL,
    MetricType.CHOLESTEROL: _CHOLESTEROL,
    MetricType.TRIGLYCERIDES: {"mmol/l": 88.57},
    MetricType.CREATININE: {"umol/l": 1 / 88.4},
    MetricType.UREA: {"mmol/l": 6.006},
    MetricType.VITAMIN_D: {"nmol/l": 1 / 2.496},
    MetricType.VITAMIN_B12: {"pmol/l": 1.355},
    MetricType.HEMOGLOBIN: {"g/l": 0.1},
    MetricType.WBC: _CELL_COUNT,
    MetricType.PLATELETS: _CELL_COUNT,
    MetricType.WEIGHT: {"lb": 0.4536},
    MetricType.HEIGHT: {"in": 2.54, "m": 100.0},
    MetricType.TEMPERATURE: {"°f": _f_to_c},
}
for _glucose_type in GLUCOSE_TYPES:
    _CONVERSIONS[_glucose_type] = {"mmol/l": 18.016}


def to_canonical(metric_type: MetricType, value: float, unit: Optional[str]) -> float:
    """Convert ``value`` reported in ``unit`` into the canonical unit of ``metric_type``.

    Units without a known conversion are assumed to already be canonical.
    Temperatures without a unit above 50 are read as Fahrenheit.
    """
    unit_norm = normalize_unit_text(unit)
    if metric_type is MetricType.TEMPERATURE and not unit_norm and value > 50:
        unit_norm = "°f"
    converter = _CONVERSIONS.get(metric_type, {}).get(unit_norm)
    if converter is None:
        return value
    if callable(converter):
        return converter(value)
    return value * converter


__all__ = ["normalize_unit_text", "to_canonical"]

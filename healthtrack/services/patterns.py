"""Pattern catalog for lab-report text.

Every metric type owns an ordered tuple of ``ExtractionPattern``. Matchers run
against normalized text (lower-cased, whitespace collapsed). Processors turn a
match into a typed reading, or ``None`` when the captured value is outside the
extraction plausibility bounds (phone numbers, dates and reference-interval
bounds read as values).

Generic keywords carry explicit exclusions for their more specific
neighbours, e.g. ``t4`` never matches inside ``free t4`` and ``glucose`` never
matches ``fasting glucose``.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Dict, Mapping, NamedTuple, Optional, Tuple

from healthtrack.schemas.metrics import (
    BloodPressureReading,
    LipidPanelReading,
    Reading,
    ScalarReading,
)
from healthtrack.services.metric_types import MetricType, canonical_unit
from healthtrack.services.units import to_canonical

Processor = Callable[["re.Match[str]", str], Optional[Reading]]
Bounds = Tuple[float, float]


class ExtractionPattern(NamedTuple):
    matcher: "re.Pattern[str]"
    processor: Processor


NUM = r"(?P<value>\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
INT3 = r"(?P<value>\d{2,3})(?![\d.])"
# separators between a keyword and its value, optionally with "(unit)" or "(method)"
SEP = r"[\s:=\-]*(?:\([^)]{0,40}\)[\s:=\-]*)?"
WINDOW = 200

# ---- Extraction plausibility bounds (inclusive, canonical units) ----
EXTRACTION_BOUNDS: Mapping[MetricType, Bounds] = MappingProxyType({
    MetricType.GLUCOSE: (30, 500),
    MetricType.FASTING_GLUCOSE: (30, 500),
    MetricType.RANDOM_GLUCOSE: (30, 500),
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
})
SYSTOLIC_BOUNDS: Bounds = (70, 250)
DIASTOLIC_BOUNDS: Bounds = (40, 150)
PANEL_BOUNDS: Mapping[str, Bounds] = MappingProxyType({
    "total": (100, 400),
    "hdl": (20, 100),
    "ldl": (50, 300),
})

_PRECISION = {MetricType.TEMPERATURE: 1, MetricType.BMI: 1}

# ---- Keywords ----
FASTING_GLUCOSE_KW = (
    r"(?:\bfasting\s*(?:blood\s*|plasma\s*)?(?:glucose|sugar)\b"
    r"|\b(?:fbs|fbg|fpg)\b"
    r"|\b(?:blood\s*sugar|blood\s*glucose|glucose)\s*,?\s*\(?\s*fasting\b\)?)"
)
RANDOM_GLUCOSE_KW = (
    r"(?:\brandom\s*(?:blood\s*|plasma\s*)?(?:glucose|sugar)\b"
    r"|\b(?:rbs|rbg)\b"
    r"|\b(?:blood\s*sugar|blood\s*glucose|glucose)\s*,?\s*\(?\s*random\b\)?)"
)
GLUCOSE_KW = (
    r"(?<!fasting )(?<!fasting blood )(?<!fasting plasma )"
    r"(?<!random )(?<!random blood )(?<!random plasma )(?<!average )"
    r"\b(?:blood\s*glucose|plasma\s*glucose|blood\s*sugar|glucose)\b"
    r"(?!\s*,?\s*\(?\s*(?:fasting|random)\b)"
)
HBA1C_KW = r"\b(?:hba1c|hb\s*a1c|a1c|glycated\s*ha?emoglobin|glycosylated\s*ha?emoglobin)\b"
TOTAL_CHOLESTEROL_KW = (
    r"(?:\btotal\s*cholesterol\b|\bcholesterol\s*,?\s*total\b|\bserum\s*cholesterol\b"
    r"|(?<!hdl )(?<!ldl )(?<!vldl )(?<!hdl-)(?<!ldl-)\bcholesterol\b"
    r"(?!\s*,?\s*(?:hdl|ldl|vldl)\b))"
)
HDL_KW = (
    r"(?<!non-)(?<!non )\b(?:hdl\b|high\s*density\s*lipoprotein\b)"
    r"(?:\s*-?\s*c\b)?(?:\s*cholesterol\b)?"
)
LDL_KW = (
    r"(?<!very )\b(?:ldl\b|low\s*density\s*lipoprotein\b)"
    r"(?:\s*-?\s*c\b)?(?:\s*cholesterol\b)?"
)
VLDL_KW = r"\b(?:vldl\b|very\s*low\s*density\s*lipoprotein\b)(?:\s*-?\s*c\b)?(?:\s*cholesterol\b)?"
TRIGLYCERIDES_KW = r"\b(?:triglycerides?|tgl?)\b"
TSH_KW = r"\b(?:tsh|thyroid\s*stimulating\s*hormone)\b"
FREE_T3_KW = r"\b(?:free\s*-?\s*t3|ft3|free\s*triiodothyronine)\b"
T3_KW = r"(?<!free )(?<!free-)\b(?:total\s*t3|total\s*triiodothyronine|t3|triiodothyronine)\b"
FREE_T4_KW = r"\b(?:free\s*-?\s*t4|ft4|free\s*thyroxine)\b"
T4_KW = r"(?<!free )(?<!free-)\b(?:total\s*t4|total\s*thyroxine|t4|thyroxine)\b"
VITAMIN_D_KW = (
    r"\b(?:(?:25\s*-?\s*(?:oh|hydroxy)\s*)?vitamin\s*d3?|vit\.?\s*d3?)\b"
    r"(?:\s*,?\s*\(?\s*25\s*-?\s*(?:oh|hydroxy)\)?)?"
)
VITAMIN_B12_KW = r"\b(?:vitamin\s*b\s*-?\s*12|vit\.?\s*b\s*-?\s*12|(?:cyano)?cobalamin)\b"
HEMOGLOBIN_KW = (
    r"(?<!glycated )(?<!glycosylated )(?<!corpuscular )"
    r"\b(?:ha?emoglobin|hgb|hb)\b(?!\s*a1c)"
)
WBC_KW = (
    r"\b(?:white\s*blood\s*cells?(?:\s*count)?|total\s*leu[ck]ocyte\s*count"
    r"|wbc(?:\s*count)?|tlc|leu[ck]ocytes?)\b"
)
PLATELETS_KW = r"\b(?:platelets?(?:\s*count)?|plt)\b"
CREATININE_KW = r"\b(?:serum\s*)?(?:creatinine|creat)\b(?!\s*clearance)"
UREA_KW = r"\b(?:blood\s*urea\s*nitrogen|bun|blood\s*urea|serum\s*urea|urea)\b"
BLOOD_PRESSURE_KW = r"(?:\bblood\s*pressure\b|\bbp\b)"
WEIGHT_KW = r"\b(?:body\s*weight|weight|wt)\b"
HEIGHT_KW = r"\b(?:height|ht)\b"
HEART_RATE_KW = r"\b(?:heart\s*rate|pulse(?:\s*rate)?|hr)\b"
TEMPERATURE_KW = r"\b(?:body\s*temp(?:erature)?|temperature|temp)\b"
BMI_KW = r"\b(?:bmi|body\s*mass\s*index)\b"

# ---- Units ----
MG_DL = r"mg\s*/\s*dl"
GLUCOSE_UNIT = MG_DL + r"|mmol\s*/\s*l"
LIPID_UNIT = GLUCOSE_UNIT
CELL_UNIT = (
    r"(?:x\s*)?10\s*\^?\s*[39]\s*/\s*[uµμ]?l|k\s*/\s*[uµμ]l|lakhs?(?:\s*/\s*(?:cumm|[uµμ]l))?"
    r"|(?:cells\s*)?/\s*(?:cumm|mm3|[uµμ]l)"
)
TEMPERATURE_UNIT = r"°\s*[cf]\b|deg(?:rees)?\s*[cf]\b|celsius|fahrenheit|[cf]\b"


def _to_float(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def _within(value: Optional[float], bounds: Bounds) -> bool:
    return value is not None and bounds[0] <= value <= bounds[1]


def _keyword_pattern(keyword: str, unit: str = "", value: str = NUM) -> "re.Pattern[str]":
    body = keyword + SEP + value
    if unit:
        body += r"(?:\s*(?P<unit>" + unit + r"))?"
    return re.compile(body)


def _unit_pattern(unit: str, value: str = NUM) -> "re.Pattern[str]":
    return re.compile(r"(?<![\w.,/])" + value + r"\s*(?P<unit>" + unit + r")")


def _scalar_processor(metric_type: MetricType) -> Processor:
    bounds = EXTRACTION_BOUNDS[metric_type]
    digits = _PRECISION.get(metric_type, 2)
    unit = canonical_unit(metric_type)

    def process(match: "re.Match[str]", text: str) -> Optional[ScalarReading]:
        raw = _to_float(match.group("value"))
        if raw is None:
            return None
        value = round(to_canonical(metric_type, raw, match.groupdict().get("unit")), digits)
        if not _within(value, bounds):
            return None
        return ScalarReading(value=value, unit=unit)

    return process


def _scalar(metric_type: MetricType, keyword: str, unit: str = "", value: str = NUM) -> ExtractionPattern:
    return ExtractionPattern(_keyword_pattern(keyword, unit, value), _scalar_processor(metric_type))


def _scalar_by_unit(metric_type: MetricType, unit: str, value: str = NUM) -> ExtractionPattern:
    return ExtractionPattern(_unit_pattern(unit, value), _scalar_processor(metric_type))


# ---- Composite processors ----
_BP_VALUES = r"(?P<systolic>\d{2,3})\s*(?:/|-|\s+over\s+)\s*(?P<diastolic>\d{2,3})(?!\d)"
_DIASTOLIC = re.compile(
    r"\bdiastolic(?:\s*(?:blood\s*)?pressure)?" + SEP + r"(?P<diastolic>\d{2,3})(?!\d)"
)


def _blood_pressure_processor(match: "re.Match[str]", text: str) -> Optional[BloodPressureReading]:
    systolic = _to_float(match.group("systolic"))
    diastolic_raw = match.groupdict().get("diastolic")
    if diastolic_raw is None:
        window = text[max(0, match.start() - WINDOW): match.end() + WINDOW]
        found = _DIASTOLIC.search(window)
        if not found:
            return None
        diastolic_raw = found.group("diastolic")
    diastolic = _to_float(diastolic_raw)
    if not (_within(systolic, SYSTOLIC_BOUNDS) and _within(diastolic, DIASTOLIC_BOUNDS)):
        return None
    return BloodPressureReading(systolic=systolic, diastolic=diastolic)


_PANEL_PARTS = (
    ("total", MetricType.TOTAL_CHOLESTEROL, _keyword_pattern(TOTAL_CHOLESTEROL_KW, LIPID_UNIT)),
    ("hdl", MetricType.HDL_CHOLESTEROL, _keyword_pattern(HDL_KW, LIPID_UNIT)),
    ("ldl", MetricType.LDL_CHOLESTEROL, _keyword_pattern(LDL_KW, LIPID_UNIT)),
)


def _lipid_panel_processor(match: "re.Match[str]", text: str) -> Optional[LipidPanelReading]:
    window = text[max(0, match.start() - WINDOW): match.end() + WINDOW]
    parts: Dict[str, float] = {}
    for field, metric_type, pattern in _PANEL_PARTS:
        for found in pattern.finditer(window):
            raw = _to_float(found.group("value"))
            if raw is None:
                continue
            value = round(to_canonical(metric_type, raw, found.groupdict().get("unit")), 2)
            if _within(value, PANEL_BOUNDS[field]):
                parts[field] = value
                break
    if not parts:
        return None
    return LipidPanelReading(**parts)


# ---- Catalog ----
PATTERN_CATALOG: Mapping[MetricType, Tuple[ExtractionPattern, ...]] = MappingProxyType({
    MetricType.BLOOD_PRESSURE: (
        ExtractionPattern(
            re.compile(BLOOD_PRESSURE_KW + SEP + _BP_VALUES),
            _blood_pressure_processor,
        ),
        ExtractionPattern(
            re.compile(r"(?<![\d/])" + _BP_VALUES + r"\s*mm\s*hg\b"),
            _blood_pressure_processor,
        ),
        ExtractionPattern(
            re.compile(r"\bsystolic(?:\s*(?:blood\s*)?pressure)?" + SEP + r"(?P<systolic>\d{2,3})(?!\d)"),
            _blood_pressure_processor,
        ),
    ),
    MetricType.FASTING_GLUCOSE: (_scalar(MetricType.FASTING_GLUCOSE, FASTING_GLUCOSE_KW, GLUCOSE_UNIT),),
    MetricType.RANDOM_GLUCOSE: (_scalar(MetricType.RANDOM_GLUCOSE, RANDOM_GLUCOSE_KW, GLUCOSE_UNIT),),
    MetricType.GLUCOSE: (_scalar(MetricType.GLUCOSE, GLUCOSE_KW, GLUCOSE_UNIT),),
    MetricType.HBA1C: (_scalar(MetricType.HBA1C, HBA1C_KW, r"%"),),
    MetricType.CHOLESTEROL: (
        ExtractionPattern(
            re.compile(r"\b(?:lipid\s*(?:profile|panel)|cholesterol)\b"),
            _lipid_panel_processor,
        ),
    ),
    MetricType.TOTAL_CHOLESTEROL: (_scalar(MetricType.TOTAL_CHOLESTEROL, TOTAL_CHOLESTEROL_KW, LIPID_UNIT),),
    MetricType.HDL_CHOLESTEROL: (_scalar(MetricType.HDL_CHOLESTEROL, HDL_KW, LIPID_UNIT),),
    MetricType.LDL_CHOLESTEROL: (_scalar(MetricType.LDL_CHOLESTEROL, LDL_KW, LIPID_UNIT),),
    MetricType.VLDL_CHOLESTEROL: (_scalar(MetricType.VLDL_CHOLESTEROL, VLDL_KW, LIPID_UNIT),),
    MetricType.TRIGLYCERIDES: (_scalar(MetricType.TRIGLYCERIDES, TRIGLYCERIDES_KW, LIPID_UNIT),),
    MetricType.TSH: (_scalar(MetricType.TSH, TSH_KW, r"[mµμu]?\s*iu\s*/\s*m?l"),),
    MetricType.FREE_T3: (_scalar(MetricType.FREE_T3, FREE_T3_KW, r"pg\s*/\s*ml"),),
    MetricType.T3: (_scalar(MetricType.T3, T3_KW, r"pg\s*/\s*ml"),),
    MetricType.FREE_T4: (_scalar(MetricType.FREE_T4, FREE_T4_KW, r"ng\s*/\s*dl"),),
    MetricType.T4: (_scalar(MetricType.T4, T4_KW, r"[µμu]g\s*/\s*dl|mcg\s*/\s*dl"),),
    MetricType.VITAMIN_D: (_scalar(MetricType.VITAMIN_D, VITAMIN_D_KW, r"ng\s*/\s*ml|nmol\s*/\s*l"),),
    MetricType.VITAMIN_B12: (_scalar(MetricType.VITAMIN_B12, VITAMIN_B12_KW, r"pg\s*/\s*ml|pmol\s*/\s*l"),),
    MetricType.HEMOGLOBIN: (_scalar(MetricType.HEMOGLOBIN, HEMOGLOBIN_KW, r"gm?\s*/\s*dl|g\s*/\s*l"),),
    MetricType.WBC: (_scalar(MetricType.WBC, WBC_KW, CELL_UNIT),),
    MetricType.PLATELETS: (_scalar(MetricType.PLATELETS, PLATELETS_KW, CELL_UNIT),),
    MetricType.CREATININE: (
        _scalar(MetricType.CREATININE, CREATININE_KW, MG_DL + r"|(?:[µμu]|micro)mol\s*/\s*l"),
    ),
    MetricType.UREA: (_scalar(MetricType.UREA, UREA_KW, MG_DL + r"|mmol\s*/\s*l"),),
    MetricType.WEIGHT: (
        _scalar(MetricType.WEIGHT, WEIGHT_KW, r"kgs?\b(?!\s*/)|kilograms?|lbs?\b|pounds?"),
        _scalar_by_unit(MetricType.WEIGHT, r"kgs?\b(?!\s*/)|kilograms?"),
    ),
    MetricType.HEIGHT: (
        _scalar(MetricType.HEIGHT, HEIGHT_KW, r"cms?\b|centimet(?:er|re)s?|met(?:er|re)s?|m\b|inch(?:es)?"),
        _scalar_by_unit(MetricType.HEIGHT, r"cms?\b|centimet(?:er|re)s?"),
    ),
    MetricType.HEART_RATE: (
        _scalar(MetricType.HEART_RATE, HEART_RATE_KW, r"bpm|beats\s*/\s*min", INT3),
        _scalar_by_unit(MetricType.HEART_RATE, r"bpm\b", INT3),
    ),
    MetricType.TEMPERATURE: (
        _scalar(MetricType.TEMPERATURE, TEMPERATURE_KW, TEMPERATURE_UNIT),
        _scalar_by_unit(MetricType.TEMPERATURE, r"°\s*[cf]\b|celsius|fahrenheit"),
    ),
    MetricType.BMI: (_scalar(MetricType.BMI, BMI_KW),),
})


__all__ = [
    "ExtractionPattern",
    "PATTERN_CATALOG",
    "EXTRACTION_BOUNDS",
    "SYSTOLIC_BOUNDS",
    "DIASTOLIC_BOUNDS",
    "PANEL_BOUNDS",
]

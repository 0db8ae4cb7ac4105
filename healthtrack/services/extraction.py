"""Extraction engine: lab-report text -> candidate health metric records."""
from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Callable, List, Mapping, Optional, Tuple

from healthtrack.schemas.metrics import HealthMetricRecord, MetricSource, build_record
from healthtrack.services.dates import resolve_report_date
from healthtrack.services.identifiers import utcnow
from healthtrack.services.metric_types import MetricType
from healthtrack.services.patterns import PATTERN_CATALOG, ExtractionPattern

logger = logging.getLogger("healthtrack")

Clock = Callable[[], datetime]


def normalize_text(value: str) -> str:
    return re.sub(r"\s+", " ", (value or "").strip().lower())


def extraction_note(file_name: str) -> str:
    return f"Extracted from {file_name}" if file_name else "Extracted from report text"


def _first_reading(patterns: Tuple[ExtractionPattern, ...], clean_text: str):
    for pattern in patterns:
        for match in pattern.matcher.finditer(clean_text):
            reading = pattern.processor(match, clean_text)
            if reading is not None:
                return reading
    return None


def extract_health_data(
    text: str,
    file_name: str = "",
    *,
    clock: Optional[Clock] = None,
    report_date: Optional[date] = None,
    catalog: Mapping[MetricType, Tuple[ExtractionPattern, ...]] = PATTERN_CATALOG,
) -> List[HealthMetricRecord]:
    """Apply the pattern catalog to ``text`` and return candidate records.

    At most one record per metric type: patterns are tried in catalog order
    and the first reading a processor accepts wins. Candidates carry no id;
    ``validate_health_data`` assigns one.
    """
    now = (clock or utcnow)()
    clean_text = normalize_text(text)
    if report_date is None:
        report_date = resolve_report_date(text, today=now.date())
    notes = extraction_note(file_name)

    records: List[HealthMetricRecord] = []
    if not clean_text:
        return records
    for metric_type, patterns in catalog.items():
        reading = _first_reading(patterns, clean_text)
        if reading is None:
            continue
        records.append(
            build_record(
                metric_type,
                reading,
                date=report_date,
                source=MetricSource.PDF_EXTRACTION,
                created_at=now,
                notes=notes,
            )
        )

    logger.info({
        "function": "extract_health_data",
        "file_name": file_name,
        "record_count": len(records),
        "types": [r.type.value for r in records],
        "report_date": report_date.isoformat(),
    })
    return records


__all__ = ["extract_health_data", "normalize_text", "extraction_note"]

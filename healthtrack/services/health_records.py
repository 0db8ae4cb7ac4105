"""Persistence helpers for health metric records and uploaded reports."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from healthtrack.models.health_metric import HealthMetric
from healthtrack.models.uploaded_report import UploadedReport
from healthtrack.schemas.metrics import (
    RECORD_CLASSES,
    BloodPressureRecord,
    HealthMetricRecord,
    LipidPanelRecord,
    ScalarMetricRecord,
)
from healthtrack.services.identifiers import new_report_id, utcnow
from healthtrack.services.metric_types import MetricCategory, MetricType

logger = logging.getLogger("healthtrack")

_VARIANT_COLUMNS = ("value", "systolic", "diastolic", "total", "hdl", "ldl")


def _apply_record(row: HealthMetric, record: HealthMetricRecord) -> HealthMetric:
    row.type = record.type.value
    row.kind = record.kind
    row.date = record.date
    row.unit = record.unit
    row.notes = record.notes
    row.source = record.source.value
    for column in _VARIANT_COLUMNS:
        setattr(row, column, getattr(record, column, None))
    return row


def record_to_row(record: HealthMetricRecord) -> HealthMetric:
    if not record.id:
        raise ValueError("only validated records (with an id) can be stored")
    row = HealthMetric(id=record.id, created_at=record.created_at)
    return _apply_record(row, record)


def row_to_record(row: HealthMetric) -> HealthMetricRecord:
    record_cls = RECORD_CLASSES[MetricCategory(row.kind)]
    fields = {
        "id": row.id,
        "type": MetricType(row.type),
        "date": row.date,
        "unit": row.unit,
        "notes": row.notes,
        "source": row.source,
        "created_at": row.created_at,
    }
    if record_cls is ScalarMetricRecord:
        fields["value"] = row.value
    elif record_cls is BloodPressureRecord:
        fields.update(systolic=row.systolic, diastolic=row.diastolic)
    elif record_cls is LipidPanelRecord:
        fields.update(total=row.total, hdl=row.hdl, ldl=row.ldl)
    return record_cls(**fields)


# ---------- Metrics ----------
def list_records(db: Session, metric_type: Optional[MetricType] = None) -> List[HealthMetricRecord]:
    query = db.query(HealthMetric)
    if metric_type is not None:
        query = query.filter(HealthMetric.type == metric_type.value)
    rows = query.order_by(HealthMetric.date.desc(), HealthMetric.created_at.desc()).all()
    return [row_to_record(row) for row in rows]


def get_record(db: Session, record_id: str) -> Optional[HealthMetricRecord]:
    row = db.query(HealthMetric).filter(HealthMetric.id == record_id).first()
    return row_to_record(row) if row else None


def save_records(db: Session, records: Iterable[HealthMetricRecord]) -> List[HealthMetricRecord]:
    saved = list(records)
    for record in saved:
        db.add(record_to_row(record))
    db.commit()
    return saved


def replace_record(db: Session, record_id: str, record: HealthMetricRecord) -> Optional[HealthMetricRecord]:
    """Replace a stored record wholesale, keeping its ``id`` and ``created_at``."""
    row = db.query(HealthMetric).filter(HealthMetric.id == record_id).first()
    if not row:
        return None
    _apply_record(row, record)
    db.commit()
    db.refresh(row)
    return row_to_record(row)


def delete_record(db: Session, record_id: str) -> bool:
    row = db.query(HealthMetric).filter(HealthMetric.id == record_id).first()
    if not row:
        return False
    db.delete(row)
    db.commit()
    return True


# ---------- Reports ----------
def create_report(
    db: Session,
    *,
    file_name: str,
    file_size: int,
    file_type: str,
    extracted_data_count: int,
    notes: Optional[str] = None,
    upload_date: Optional[datetime] = None,
    records: Iterable[HealthMetricRecord] = (),
) -> UploadedReport:
    """Insert a report row and the metric records extracted from it in one transaction."""
    report = UploadedReport(
        id=new_report_id(),
        file_name=file_name,
        file_size=file_size,
        file_type=file_type,
        upload_date=upload_date or utcnow(),
        notes=notes,
        extracted_data_count=extracted_data_count,
    )
    try:
        db.add(report)
        for record in records:
            db.add(record_to_row(record))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(report)
    return report


def list_reports(db: Session) -> List[UploadedReport]:
    return db.query(UploadedReport).order_by(UploadedReport.upload_date.desc()).all()


def count_reports(db: Session) -> int:
    return db.query(UploadedReport).count()


def delete_report(db: Session, report_id: str) -> bool:
    """Delete the report row only; metrics extracted from it are kept."""
    report = db.query(UploadedReport).filter(UploadedReport.id == report_id).first()
    if not report:
        return False
    db.delete(report)
    db.commit()
    logger.info({"function": "delete_report", "report_id": report_id})
    return True


__all__ = [
    "record_to_row",
    "row_to_record",
    "list_records",
    "get_record",
    "save_records",
    "replace_record",
    "delete_record",
    "create_report",
    "list_reports",
    "count_reports",
    "delete_report",
]

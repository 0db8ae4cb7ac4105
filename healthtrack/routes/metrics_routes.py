# healthtrack/routes/metrics_routes.py
from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from healthtrack.db.session import get_db
from healthtrack.routes.deps import get_clock
from healthtrack.schemas.metrics import (
    ClassifiedRecord,
    HealthMetricIn,
    HealthMetricRecord,
    MetricValidationResult,
)
from healthtrack.schemas.stats import HealthStats, InsightsOut
from healthtrack.schemas.trends import TrendOut
from healthtrack.services import health_records
from healthtrack.services.export import EXPORT_RANGES, export_filename, select_records, to_csv, to_export_document
from healthtrack.services.health_stats import PERIODS, compute_stats, filter_by_period
from healthtrack.services.insights import generate_insights
from healthtrack.services.metric_types import display_name, format_metric_value, parse_metric_type
from healthtrack.services.status import classify
from healthtrack.services.trends import DEFAULT_TREND_DAYS, MAX_TREND_DAYS, metric_trend
from healthtrack.services.validation import build_manual_record, validate_health_metric

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


def _invalid(result: MetricValidationResult) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=result.model_dump())


@router.get("", response_model=List[ClassifiedRecord])
def list_metrics(
    type_tag: Optional[str] = Query(None, alias="type", description="Metric type tag, e.g. totalCholesterol"),
    period: str = Query("all", description=" | ".join(PERIODS)),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    metric_type = parse_metric_type(type_tag) if type_tag else None
    if type_tag and metric_type is None:
        raise HTTPException(status_code=400, detail=f"Unknown metric type: {type_tag}")
    if period not in PERIODS:
        raise HTTPException(status_code=400, detail=f"period must be one of {', '.join(PERIODS)}")
    records = filter_by_period(health_records.list_records(db, metric_type), period, clock().date())
    return [
        ClassifiedRecord(
            record=record,
            status=classify(record),
            display_name=display_name(record.type),
            display_value=format_metric_value(record),
        )
        for record in records
    ]


@router.post("/validate", response_model=MetricValidationResult)
def validate_metric(payload: HealthMetricIn):
    return validate_health_metric(payload)


@router.post("", response_model=HealthMetricRecord, status_code=status.HTTP_201_CREATED)
def create_metric(
    payload: HealthMetricIn,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    result = validate_health_metric(payload)
    if not result.is_valid:
        return _invalid(result)
    record = build_manual_record(payload, clock=clock)
    health_records.save_records(db, [record])
    return record


@router.put("/{metric_id}", response_model=HealthMetricRecord)
def update_metric(
    metric_id: str,
    payload: HealthMetricIn,
    db: Session = Depends(get_db),
):
    existing = health_records.get_record(db, metric_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Metric not found")
    result = validate_health_metric(payload)
    if not result.is_valid:
        return _invalid(result)
    replacement = build_manual_record(payload, record_id=existing.id, created_at=existing.created_at)
    replacement = replacement.model_copy(update={"source": existing.source})
    return health_records.replace_record(db, metric_id, replacement)


@router.delete("/{metric_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_metric(metric_id: str, db: Session = Depends(get_db)):
    if not health_records.delete_record(db, metric_id):
        raise HTTPException(status_code=404, detail="Metric not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/stats", response_model=HealthStats)
def metric_stats(db: Session = Depends(get_db)):
    return compute_stats(health_records.list_records(db), health_records.count_reports(db))


@router.get("/insights", response_model=InsightsOut)
def metric_insights(
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    records = health_records.list_records(db)
    stats = compute_stats(records, health_records.count_reports(db))
    return InsightsOut(insights=generate_insights(records, stats, clock().date()))


@router.get("/trends", response_model=TrendOut)
def metric_trends(
    type_tag: str = Query(..., alias="type", description="Metric type tag, e.g. bloodPressure"),
    days: int = Query(DEFAULT_TREND_DAYS, ge=1, le=MAX_TREND_DAYS),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    metric_type = parse_metric_type(type_tag)
    if metric_type is None:
        raise HTTPException(status_code=400, detail=f"Unknown metric type: {type_tag}")
    return metric_trend(health_records.list_records(db, metric_type), metric_type, days, clock().date())


@router.get("/export")
def export_metrics(
    type_tags: Optional[List[str]] = Query(None, alias="type", description="Repeat to export several types"),
    date_range: str = Query("all", alias="range", description=" | ".join(EXPORT_RANGES)),
    start: Optional[date] = Query(None, description="First day of a custom range"),
    end: Optional[date] = Query(None, description="Last day of a custom range"),
    fmt: str = Query("csv", alias="format", description="csv | json"),
    include_reports: bool = Query(False, description="JSON only: add uploaded report entries"),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    if fmt not in ("csv", "json"):
        raise HTTPException(status_code=400, detail="format must be csv or json")
    unknown = [t for t in type_tags or [] if parse_metric_type(t) is None]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown metric type: {', '.join(unknown)}")
    now = clock()
    try:
        records = select_records(
            health_records.list_records(db),
            now.date(),
            types={parse_metric_type(t).value for t in type_tags or []},
            date_range=date_range,
            start=start,
            end=end,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    headers = {"Content-Disposition": f'attachment; filename="{export_filename(now, fmt)}"'}
    if fmt == "csv":
        return Response(content=to_csv(records), media_type="text/csv", headers=headers)
    reports = health_records.list_reports(db) if include_reports else None
    document = to_export_document(records, now, date_range, reports)
    return JSONResponse(content=document.model_dump(mode="json"), headers=headers)

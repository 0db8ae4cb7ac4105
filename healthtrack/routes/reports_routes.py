# healthtrack/routes/reports_routes.py
import logging
import os
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from healthtrack.db.session import get_db
from healthtrack.routes.deps import get_clock
from healthtrack.schemas.reports import UploadBatchResult, UploadedReportOut, UploadFileResult
from healthtrack.services import health_records
from healthtrack.services.report_pipeline import UploadOutcome, process_batch

logger = logging.getLogger("healthtrack")

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (ValueError, TypeError):
        return default


MAX_UPLOAD_BYTES = _env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)


def _sanitize_filename(name: Optional[str]) -> str:
    return os.path.basename(name or "") or "file"


def _store_outcome(db: Session, outcome: UploadOutcome, uploaded_at: datetime) -> UploadFileResult:
    if not outcome.ok:
        return UploadFileResult(file_name=outcome.file_name, status="error", error=outcome.error)
    try:
        report = health_records.create_report(
            db,
            file_name=outcome.file_name,
            file_size=outcome.file_size,
            file_type=outcome.file_type,
            extracted_data_count=len(outcome.records),
            upload_date=uploaded_at,
            records=outcome.records,
        )
    except Exception as exc:
        logger.exception({"function": "upload_reports", "file_name": outcome.file_name, "status": "store_failed"})
        return UploadFileResult(file_name=outcome.file_name, status="error", error=f"Could not store report: {exc}")
    return UploadFileResult(
        file_name=outcome.file_name,
        status="ok",
        source=outcome.source,
        report=UploadedReportOut.model_validate(report),
        records=outcome.records,
        rejected_count=outcome.rejected_count,
    )


@router.post("/upload", response_model=UploadBatchResult)
async def upload_reports(
    files: List[UploadFile] = File(...),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Process each uploaded file independently; one failing file never aborts the batch."""
    if not files:
        raise HTTPException(status_code=400, detail="At least one file is required")

    slots: List[Optional[UploadOutcome]] = []
    batch = []
    for upload in files:
        data = await upload.read()
        name = _sanitize_filename(upload.filename)
        content_type = (upload.content_type or "").lower()
        if len(data) > MAX_UPLOAD_BYTES:
            slots.append(UploadOutcome(
                file_name=name,
                file_size=len(data),
                file_type=content_type,
                error=f"File size exceeds the {MAX_UPLOAD_BYTES} byte limit",
            ))
            continue
        slots.append(None)
        batch.append((data, name, content_type))

    processed = iter(await process_batch(batch, clock=clock))
    uploaded_at = clock()
    results: List[UploadFileResult] = []
    for slot in slots:
        # blocking session work stays off the event loop
        results.append(await run_in_threadpool(_store_outcome, db, slot or next(processed), uploaded_at))
    succeeded = sum(1 for r in results if r.status == "ok")
    logger.info({
        "function": "upload_reports",
        "files": len(results),
        "succeeded": succeeded,
        "failed": len(results) - succeeded,
    })
    return UploadBatchResult(results=results, succeeded=succeeded, failed=len(results) - succeeded)


@router.get("", response_model=List[UploadedReportOut])
def list_reports(db: Session = Depends(get_db)):
    return health_records.list_reports(db)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_report(report_id: str, db: Session = Depends(get_db)):
    """Delete the report entry; metrics extracted from it stay."""
    if not health_records.delete_report(db, report_id):
        raise HTTPException(status_code=404, detail="Report not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

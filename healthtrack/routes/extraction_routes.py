# healthtrack/routes/extraction_routes.py
from typing import Callable
from datetime import datetime

from fastapi import APIRouter, Depends

from healthtrack.routes.deps import get_clock
from healthtrack.schemas.metrics import ExtractRequest, ExtractResponse
from healthtrack.services.dates import resolve_report_date
from healthtrack.services.extraction import extract_health_data
from healthtrack.services.validation import screen_health_data

router = APIRouter(prefix="/api", tags=["extraction"])


@router.post("/extract", response_model=ExtractResponse)
def extract(payload: ExtractRequest, clock: Callable[[], datetime] = Depends(get_clock)):
    """Preview: extract and validate records from raw text without storing them."""
    now = clock()
    report_date = resolve_report_date(payload.text, today=now.date())
    candidates = extract_health_data(
        payload.text,
        payload.file_name,
        clock=lambda: now,
        report_date=report_date,
    )
    report = screen_health_data(candidates)
    return ExtractResponse(
        records=report.accepted,
        rejected_count=len(report.rejected),
        report_date=report_date,
    )

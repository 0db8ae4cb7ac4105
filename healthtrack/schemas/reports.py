# healthtrack/schemas/reports.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from healthtrack.schemas.metrics import HealthMetricRecord


class UploadedReportOut(BaseModel):
    id: str
    file_name: str
    file_size: int
    file_type: str
    upload_date: datetime
    notes: Optional[str] = None
    extracted_data_count: int = 0

    model_config = ConfigDict(from_attributes=True)


class UploadFileResult(BaseModel):
    """Outcome for one file of a multi-file upload."""

    file_name: str
    status: str = Field(..., description="'ok' or 'error'")
    error: Optional[str] = None
    source: Optional[str] = Field(None, description="pdf | ocr | text")
    report: Optional[UploadedReportOut] = None
    records: List[HealthMetricRecord] = Field(default_factory=list)
    rejected_count: int = 0


class UploadBatchResult(BaseModel):
    results: List[UploadFileResult]
    succeeded: int
    failed: int

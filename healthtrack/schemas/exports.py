# healthtrack/schemas/exports.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from healthtrack.schemas.metrics import HealthMetricRecord


class ExportedReport(BaseModel):
    id: str
    file_name: str
    upload_date: datetime
    file_size: int
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class HealthExportOut(BaseModel):
    export_date: datetime
    total_records: int
    date_range: str
    health_metrics: List[HealthMetricRecord]
    reports: Optional[List[ExportedReport]] = None

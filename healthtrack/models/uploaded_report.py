# healthtrack/models/uploaded_report.py
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from healthtrack.db.session import Base


class UploadedReport(Base):
    """An uploaded report file.

    Linked to the metrics it produced only through ``extracted_data_count``;
    deleting a report leaves its metrics in place.
    """

    __tablename__ = "uploaded_reports"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    file_type: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    upload_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    extracted_data_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

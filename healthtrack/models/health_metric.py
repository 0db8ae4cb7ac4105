# healthtrack/models/health_metric.py
import datetime as dt
from typing import Optional

from sqlalchemy import Date, DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from healthtrack.db.session import Base


class HealthMetric(Base):
    """One stored health metric record.

    Variant-specific columns (value / systolic+diastolic / total+hdl+ldl) are
    nullable; ``kind`` says which group is populated.
    """

    __tablename__ = "health_metrics"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    type: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)
    unit: Mapped[str] = mapped_column(String(16), nullable=False, default="")

    value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    systolic: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    diastolic: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    hdl: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    ldl: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)

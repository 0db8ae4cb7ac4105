# healthtrack/schemas/trends.py
import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from healthtrack.services.metric_types import MetricType


class TrendPoint(BaseModel):
    date: dt.date
    value: Optional[float] = None


class TrendSeries(BaseModel):
    label: str
    unit: str
    points: List[TrendPoint]


class TrendOut(BaseModel):
    type: MetricType
    display_name: str
    days: int
    start: dt.date
    end: dt.date
    series: List[TrendSeries] = Field(default_factory=list)
    trend: Literal["up", "down", "neutral"] = "neutral"
    change_percent: float = Field(0.0, description="Magnitude of the first-to-last change, in percent.")

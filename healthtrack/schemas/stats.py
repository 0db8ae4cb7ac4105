# healthtrack/schemas/stats.py
from typing import List, Optional

from pydantic import BaseModel, Field


class HealthStats(BaseModel):
    total_reports: int = 0
    total_metrics: int = 0
    latest_blood_pressure: Optional[str] = None
    latest_blood_sugar: Optional[str] = None
    latest_cholesterol: Optional[str] = None
    latest_height: Optional[str] = None
    latest_weight: Optional[str] = None
    current_bmi: Optional[float] = None
    bmi_category: Optional[str] = None


class Insight(BaseModel):
    type: str = Field(..., description="success | warning | alert | info")
    title: str
    message: str


class InsightsOut(BaseModel):
    insights: List[Insight]

# healthtrack/schemas/metrics.py
import datetime as dt
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from healthtrack.services.metric_types import MetricCategory, MetricType, category_of


class MetricSource(str, Enum):
    MANUAL = "manual"
    PDF_EXTRACTION = "pdf_extraction"


class MetricStatus(str, Enum):
    NORMAL = "Normal"
    LOW = "Low"
    HIGH = "High"
    ABNORMAL = "Abnormal"
    UNKNOWN = "Unknown"


# ---------- Readings (processor output) ----------
class ScalarReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: float
    unit: str


class BloodPressureReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    systolic: float
    diastolic: float
    unit: str = "mmHg"


class LipidPanelReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Optional[float] = None
    hdl: Optional[float] = None
    ldl: Optional[float] = None
    unit: str = "mg/dL"


Reading = Union[ScalarReading, BloodPressureReading, LipidPanelReading]


# ---------- Records ----------
class _MetricRecordBase(BaseModel):
    """Fields shared by every health metric record variant."""

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(None, description="Assigned by the validator; None on candidates.")
    type: MetricType
    date: dt.date = Field(..., description="Calendar date the measurement refers to.")
    unit: str
    notes: Optional[str] = None
    source: MetricSource
    created_at: dt.datetime

    @model_validator(mode="after")
    def _kind_matches_type(self):
        expected = category_of(self.type).value
        kind = getattr(self, "kind", None)
        if kind != expected:
            raise ValueError(f"type '{self.type.value}' is a {expected} metric, not {kind}")
        return self


class ScalarMetricRecord(_MetricRecordBase):
    kind: Literal["scalar"] = "scalar"
    value: float


class BloodPressureRecord(_MetricRecordBase):
    kind: Literal["blood_pressure"] = "blood_pressure"
    systolic: float
    diastolic: float


class LipidPanelRecord(_MetricRecordBase):
    kind: Literal["lipid_panel"] = "lipid_panel"
    total: Optional[float] = None
    hdl: Optional[float] = None
    ldl: Optional[float] = None


HealthMetricRecord = Annotated[
    Union[ScalarMetricRecord, BloodPressureRecord, LipidPanelRecord],
    Field(discriminator="kind"),
]

RECORD_CLASSES = {
    MetricCategory.SCALAR: ScalarMetricRecord,
    MetricCategory.BLOOD_PRESSURE: BloodPressureRecord,
    MetricCategory.LIPID_PANEL: LipidPanelRecord,
}


def build_record(
    metric_type: MetricType,
    reading: Reading,
    *,
    date: dt.date,
    source: MetricSource,
    created_at: dt.datetime,
    notes: Optional[str] = None,
    record_id: Optional[str] = None,
) -> Union[ScalarMetricRecord, BloodPressureRecord, LipidPanelRecord]:
    """Assemble the record variant matching ``metric_type`` from a reading."""
    record_cls = RECORD_CLASSES[category_of(metric_type)]
    return record_cls(
        id=record_id,
        type=metric_type,
        date=date,
        notes=notes,
        source=source,
        created_at=created_at,
        **reading.model_dump(),
    )


# ---------- Manual entry / API payloads ----------
FormValue = Optional[Any]


class HealthMetricIn(BaseModel):
    """Loosely typed manual-entry form; checked by ``validate_health_metric``."""

    type: FormValue = None
    date: FormValue = None
    value: FormValue = None
    systolic: FormValue = None
    diastolic: FormValue = None
    total: FormValue = None
    hdl: FormValue = None
    ldl: FormValue = None
    unit: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class MetricValidationResult(BaseModel):
    is_valid: bool
    errors: Dict[str, str] = Field(default_factory=dict)


class ExtractRequest(BaseModel):
    text: str = Field(..., max_length=200_000, description="Plain report text.")
    file_name: str = Field("", max_length=255)


class ExtractResponse(BaseModel):
    records: List[HealthMetricRecord]
    rejected_count: int = 0
    report_date: dt.date


class ClassifiedRecord(BaseModel):
    record: HealthMetricRecord
    status: MetricStatus
    display_name: str
    display_value: str


__all__ = [
    "MetricSource",
    "MetricStatus",
    "ScalarReading",
    "BloodPressureReading",
    "LipidPanelReading",
    "Reading",
    "ScalarMetricRecord",
    "BloodPressureRecord",
    "LipidPanelRecord",
    "HealthMetricRecord",
    "RECORD_CLASSES",
    "build_record",
    "HealthMetricIn",
    "MetricValidationResult",
    "ExtractRequest",
    "ExtractResponse",
    "ClassifiedRecord",
]

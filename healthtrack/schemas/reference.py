# healthtrack/schemas/reference.py
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator


class ReferenceRange(BaseModel):
    """Clinical normal range for a single-valued metric."""

    model_config = ConfigDict(frozen=True)

    min: Optional[float] = None
    max: Optional[float] = None
    unit: str = ""
    higher_is_better: bool = False
    fasting_required: bool = False

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("min must not exceed max")
        if self.higher_is_better and self.max is not None:
            raise ValueError("higher_is_better ranges are unbounded above")
        return self


class BloodPressureRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    systolic: ReferenceRange
    diastolic: ReferenceRange
    unit: str = "mmHg"


class LipidPanelRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: ReferenceRange
    hdl: ReferenceRange
    ldl: ReferenceRange
    unit: str = "mg/dL"


AnyRange = Union[ReferenceRange, BloodPressureRange, LipidPanelRange]

"""Data models for the vitals trend pipeline."""

import math
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MetricKind(str, Enum):
    """Vital sign being trended."""

    TEMPERATURE = "Temperature"
    HEART_RATE = "Heart Rate"
    BLOOD_PRESSURE = "Blood Pressure"

    @property
    def unit(self) -> str:
        return METRIC_UNITS[self]

    @property
    def field(self) -> str:
        """Name of the VitalRecord field this metric trends."""
        return METRIC_FIELDS[self]


METRIC_UNITS = {
    MetricKind.TEMPERATURE: "°C",
    MetricKind.HEART_RATE: "bpm",
    MetricKind.BLOOD_PRESSURE: "mmHg",
}

# Blood pressure trends the systolic reading; diastolic only feeds the extrema stats
METRIC_FIELDS = {
    MetricKind.TEMPERATURE: "temperature",
    MetricKind.HEART_RATE: "heart_rate",
    MetricKind.BLOOD_PRESSURE: "systolic",
}


class Timeframe(str, Enum):
    """Bucket granularity for a trend."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class VitalRecord(BaseModel):
    """A single kiosk scan. Missing or non-finite readings are None."""

    model_config = ConfigDict(frozen=True)

    vitals_id: Optional[int] = None
    timestamp: datetime
    # Raw timelog string as stored, kept so id fallbacks match the source text
    timelog: Optional[str] = None
    temperature: Optional[float] = None
    heart_rate: Optional[float] = None
    systolic: Optional[float] = None
    diastolic: Optional[float] = None

    @field_validator("temperature", "heart_rate", "systolic", "diastolic")
    @classmethod
    def _drop_non_finite(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and not math.isfinite(value):
            return None
        return value

    def value_for(self, metric: MetricKind) -> Optional[float]:
        return getattr(self, metric.field)


class TimeBucket(BaseModel):
    """Running total for one day, week or month of a trend window."""

    period_label: str
    period_start: datetime
    sum: float = 0.0
    count: int = 0

    @property
    def average(self) -> float:
        return self.sum / self.count if self.count > 0 else 0.0


class AggregationResult(BaseModel):
    """Parallel label/value arrays, one entry per bucket, oldest first."""

    labels: List[str] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)

    @property
    def has_real_data(self) -> bool:
        return any(v > 0 for v in self.values)


class ChartPoint(BaseModel):
    x: float
    y: float
    value: float


class CurveStats(BaseModel):
    """Summary of the charted values plus y-axis tick labels."""

    average: float
    max: float
    min: float
    y_max_label: float
    y_mid_label: float
    y_min_label: float


class BloodPressureStats(BaseModel):
    """Extrema over raw readings (not bucket averages)."""

    systolic_max: float
    systolic_min: float
    diastolic_max: Optional[float] = None
    diastolic_min: Optional[float] = None


class CurveResult(BaseModel):
    points: List[ChartPoint] = Field(default_factory=list)
    path_data: str = ""
    stats: Optional[CurveStats] = None

    @property
    def is_empty(self) -> bool:
        return not self.points


class TrendView(BaseModel):
    """Everything a chart screen needs for one metric and timeframe."""

    metric: MetricKind
    timeframe: Timeframe
    unit: str
    labels: List[str] = Field(default_factory=list)
    values: List[float] = Field(default_factory=list)
    curve: CurveResult = Field(default_factory=CurveResult)
    width: float
    height: float
    has_real_data: bool = False
    record_count: int = 0
    empty_state: Optional[str] = None
    empty_message: Optional[str] = None
    bp_stats: Optional[BloodPressureStats] = None
    generated_at: datetime


class VitalFlags(BaseModel):
    high_temp: bool = False
    abnormal_hr: bool = False
    high_bp: bool = False

    @property
    def any(self) -> bool:
        return self.high_temp or self.abnormal_hr or self.high_bp


class VitalWarning(BaseModel):
    """An abnormal scan the student has not dismissed yet."""

    id: str
    recorded_at: datetime
    temperature: Optional[float] = None
    heart_rate: Optional[float] = None
    blood_pressure: str
    flags: VitalFlags

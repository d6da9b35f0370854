"""Single source of truth for what counts as an abnormal reading."""

from typing import Optional

from pydantic import BaseModel

from .config import settings
from .models import VitalFlags, VitalRecord


class VitalThresholds(BaseModel):
    """Cut-offs for flagging a scan.

    Temperature and heart rate bounds are strict (a reading equal to the
    bound is normal). Blood pressure bounds are inclusive when bp_inclusive
    is set, matching stage 1 hypertension (systolic >= 130 or diastolic >= 80).
    """

    temperature_high: float = 37.5
    heart_rate_low: float = 60.0
    heart_rate_high: float = 100.0
    systolic_high: float = 130.0
    diastolic_high: float = 80.0
    bp_inclusive: bool = True

    @classmethod
    def from_settings(cls) -> "VitalThresholds":
        return cls(
            temperature_high=settings.TEMP_HIGH,
            heart_rate_low=settings.HR_LOW,
            heart_rate_high=settings.HR_HIGH,
            systolic_high=settings.SYSTOLIC_HIGH,
            diastolic_high=settings.DIASTOLIC_HIGH,
            bp_inclusive=settings.BP_INCLUSIVE,
        )


def _above(value: float, bound: float, inclusive: bool) -> bool:
    return value >= bound if inclusive else value > bound


def classify(record: VitalRecord, thresholds: Optional[VitalThresholds] = None) -> VitalFlags:
    """Flag the abnormal readings of one scan. Missing readings are never abnormal."""
    limits = thresholds or VitalThresholds.from_settings()

    high_temp = record.temperature is not None and record.temperature > limits.temperature_high

    abnormal_hr = record.heart_rate is not None and (
        record.heart_rate < limits.heart_rate_low or record.heart_rate > limits.heart_rate_high
    )

    # A single-value BP reading (no diastolic) is not classified
    high_bp = (
        record.systolic is not None
        and record.diastolic is not None
        and (
            _above(record.systolic, limits.systolic_high, limits.bp_inclusive)
            or _above(record.diastolic, limits.diastolic_high, limits.bp_inclusive)
        )
    )

    return VitalFlags(high_temp=high_temp, abnormal_hr=abnormal_hr, high_bp=high_bp)

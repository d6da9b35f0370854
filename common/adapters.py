"""Convert Supabase vitals rows into VitalRecord objects."""

import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .logging_utils import setup_logger
from .models import VitalRecord

logger = setup_logger(__name__)

NUMERIC_FIELDS = ("temperature", "heart_rate", "systolic", "diastolic")


def parse_number(value: Any) -> Optional[float]:
    """Parse a reading that may arrive as a number, a numeric string, or null.

    Args:
        value: Raw JSON value.

    Returns:
        Finite float, or None if the value is absent or not a usable number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO 8601 timelog (a trailing 'Z' is accepted).

    Postgres trims trailing zeros from fractional seconds, so any fraction
    width from 1 to 9 digits is accepted.

    Raises:
        ValueError: If the value is missing or not ISO 8601.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Missing timelog: {value!r}")
    try:
        parsed = pd.to_datetime(value.strip(), format="ISO8601")
    except (TypeError, ValueError):
        raise ValueError(f"Invalid timelog format: {value!r}")
    if pd.isna(parsed):
        raise ValueError(f"Invalid timelog format: {value!r}")
    return parsed.to_pydatetime()


def record_from_row(row: Dict[str, Any]) -> VitalRecord:
    """Map one vitals row onto a VitalRecord.

    Raises:
        ValueError: If the row has no parseable timelog.
    """
    vitals_id = row.get("vitals_id")
    timelog = row.get("timelog")
    return VitalRecord(
        vitals_id=int(vitals_id) if isinstance(vitals_id, (int, str)) and str(vitals_id).isdigit() else None,
        timestamp=parse_timestamp(timelog),
        timelog=timelog if isinstance(timelog, str) else None,
        **{field: parse_number(row.get(field)) for field in NUMERIC_FIELDS},
    )


def records_from_rows(rows: Iterable[Dict[str, Any]]) -> List[VitalRecord]:
    """Convert rows, skipping (and reporting) those without a usable timelog."""
    records = []
    skipped = []
    for idx, row in enumerate(rows):
        if not isinstance(row, dict):
            skipped.append((idx, f"expected an object, got {type(row).__name__}"))
            continue
        try:
            records.append(record_from_row(row))
        except ValueError as e:
            skipped.append((idx, str(e)))

    if skipped:
        logger.warning(
            f"Skipped {len(skipped)} invalid vitals row(s): "
            + "; ".join(f"row {idx}: {error}" for idx, error in skipped)
        )

    return records

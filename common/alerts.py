"""Abnormal-scan warnings and scan recency checks."""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import AbstractSet, Iterable, List, Optional, Union

from .aggregation import resolve_timezone, to_local
from .models import VitalRecord, VitalWarning
from .thresholds import VitalThresholds, classify

RECENT_SCAN_WINDOW = timedelta(minutes=5)
RECENT_SCAN_LIMIT = 6


def record_id(record: VitalRecord) -> str:
    """Stable id used for dismissals.

    The row id when present, else the timelog exactly as the store returned
    it, else the ISO form of the scan timestamp.
    """
    if record.vitals_id is not None:
        return str(record.vitals_id)
    if record.timelog:
        return record.timelog
    return record.timestamp.isoformat()


def format_blood_pressure(record: VitalRecord) -> str:
    def _fmt(value: Optional[float]) -> str:
        if value is None:
            return "-"
        return str(int(value)) if value.is_integer() else str(value)

    if record.diastolic is None:
        return _fmt(record.systolic)
    return f"{_fmt(record.systolic)}/{_fmt(record.diastolic)}"


def compute_warnings(
    records: Iterable[VitalRecord],
    dismissed_ids: AbstractSet[str] = frozenset(),
    thresholds: Optional[VitalThresholds] = None,
) -> List[VitalWarning]:
    """Warnings for abnormal scans that have not been dismissed, newest first.

    Args:
        records: Scans in any order.
        dismissed_ids: Ids (see record_id) the student already acknowledged.
        thresholds: Cut-offs (defaults to the configured table).
    """
    limits = thresholds or VitalThresholds.from_settings()
    warnings = []
    for record in records:
        rid = record_id(record)
        if rid in dismissed_ids:
            continue
        flags = classify(record, limits)
        if not flags.any:
            continue
        warnings.append(
            VitalWarning(
                id=rid,
                recorded_at=record.timestamp,
                temperature=record.temperature,
                heart_rate=record.heart_rate,
                blood_pressure=format_blood_pressure(record),
                flags=flags,
            )
        )

    warnings.sort(key=lambda w: _sort_key(w.recorded_at), reverse=True)
    return warnings


def _sort_key(ts: datetime) -> float:
    # Naive timestamps are compared as UTC so mixed rows still sort
    return ts.timestamp() if ts.tzinfo else ts.replace(tzinfo=timezone.utc).timestamp()


def recent_scans(
    records: Iterable[VitalRecord],
    now: datetime,
    window: timedelta = RECENT_SCAN_WINDOW,
    limit: int = RECENT_SCAN_LIMIT,
    dismissed_ids: AbstractSet[str] = frozenset(),
) -> List[VitalRecord]:
    """Scans taken within `window` before `now`, newest first, capped at `limit`.

    Scans stamped after `now` (kiosk clock ahead of the server) are kept.
    """
    now_key = _sort_key(now)
    recent = [
        r for r in records
        if record_id(r) not in dismissed_ids
        and now_key - _sort_key(r.timestamp) <= window.total_seconds()
    ]
    recent.sort(key=lambda r: _sort_key(r.timestamp), reverse=True)
    return recent[:limit]


def scanned_today(
    records: Iterable[VitalRecord],
    now: datetime,
    tz: Union[tzinfo, str, None] = None,
) -> bool:
    """True when any scan falls on the same local calendar day as `now`."""
    zone = resolve_timezone(tz)
    today = to_local(now, zone).date()
    return any(to_local(r.timestamp, zone).date() == today for r in records)


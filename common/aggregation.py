"""Bucket vitals records into trailing daily/weekly/monthly windows.

The window is anchored to ``now`` (injected by the caller) and has a fixed
number of buckets per timeframe, so the chart's x-axis never changes length:

- daily:   14 calendar days, the last one being today
- weekly:  12 weeks starting Monday 00:00, the last one containing ``now``
- monthly: 6 calendar months, the last one being the current month

Empty buckets report an average of 0 instead of being omitted.
"""

import math
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from .config import settings
from .models import AggregationResult, MetricKind, Timeframe, TimeBucket, VitalRecord

BUCKET_COUNTS = {
    Timeframe.DAILY: 14,
    Timeframe.WEEKLY: 12,
    Timeframe.MONTHLY: 6,
}

KEY_FORMAT = "%Y-%m-%d"


def bucket_count(timeframe: Union[Timeframe, str]) -> int:
    return BUCKET_COUNTS[Timeframe(timeframe)]


def resolve_timezone(tz: Union[tzinfo, str, None] = None) -> tzinfo:
    """Return the zone used for bucket boundaries.

    Raises:
        ValueError: If the zone name is not a valid IANA identifier.
    """
    if isinstance(tz, tzinfo):
        return tz
    name = tz or settings.LOCAL_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Invalid timezone '{name}'. Use IANA timezone identifiers.")


def to_local(ts: datetime, zone: tzinfo) -> datetime:
    """Convert to naive local wall-clock time; naive input is assumed local already."""
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(zone).replace(tzinfo=None)


def _label(start: pd.Timestamp, timeframe: Timeframe) -> str:
    if timeframe == Timeframe.MONTHLY:
        return start.strftime("%b")
    return f"{start.strftime('%b')} {start.day}"


def _bucket_starts(timeframe: Timeframe, now_local: datetime) -> List[pd.Timestamp]:
    today = pd.Timestamp(now_local).normalize()
    count = BUCKET_COUNTS[timeframe]

    if timeframe == Timeframe.DAILY:
        return [today - pd.Timedelta(days=i) for i in range(count - 1, -1, -1)]

    if timeframe == Timeframe.WEEKLY:
        week_start = today - pd.Timedelta(days=today.weekday())
        return [week_start - pd.Timedelta(weeks=i) for i in range(count - 1, -1, -1)]

    current_month = today.to_period("M")
    return [(current_month - i).start_time for i in range(count - 1, -1, -1)]


def _period_starts(timestamps: pd.Series, timeframe: Timeframe) -> pd.Series:
    """Map local timestamps to the start of the bucket containing them."""
    if timeframe == Timeframe.MONTHLY:
        return timestamps.dt.to_period("M").dt.start_time

    days = timestamps.dt.normalize()
    if timeframe == Timeframe.WEEKLY:
        # weekday(): Monday == 0
        days = days - pd.to_timedelta(days.dt.weekday, unit="D")
    return days


def build_buckets(
    timeframe: Union[Timeframe, str],
    now: Optional[datetime] = None,
    tz: Union[tzinfo, str, None] = None,
) -> List[TimeBucket]:
    """Create the empty, chronologically ordered buckets for a timeframe.

    Args:
        timeframe: daily, weekly or monthly.
        now: Anchor instant (defaults to the current time).
        tz: Zone for day/week/month boundaries (defaults to settings.LOCAL_TIMEZONE).

    Returns:
        Fixed-length list of zeroed buckets, oldest first.
    """
    timeframe = Timeframe(timeframe)
    zone = resolve_timezone(tz)
    now_local = to_local(now or datetime.now(zone), zone)

    return [
        TimeBucket(period_label=_label(start, timeframe), period_start=start.to_pydatetime())
        for start in _bucket_starts(timeframe, now_local)
    ]


def fill_buckets(
    records: Iterable[VitalRecord],
    metric: Union[MetricKind, str],
    timeframe: Union[Timeframe, str],
    now: Optional[datetime] = None,
    tz: Union[tzinfo, str, None] = None,
) -> List[TimeBucket]:
    """Accumulate each record's metric value into its bucket.

    Records without a finite value for the metric, and records outside the
    window, leave every bucket untouched.
    """
    metric = MetricKind(metric)
    timeframe = Timeframe(timeframe)
    zone = resolve_timezone(tz)
    buckets = build_buckets(timeframe, now=now, tz=zone)

    readings = []
    for record in records:
        value = record.value_for(metric)
        if value is None or not math.isfinite(value):
            continue
        readings.append((to_local(record.timestamp, zone), value))

    if not readings:
        return buckets

    frame = pd.DataFrame(readings, columns=["timestamp", "value"])
    frame["timestamp"] = pd.to_datetime(frame["timestamp"])
    frame["bucket"] = _period_starts(frame["timestamp"], timeframe).dt.strftime(KEY_FORMAT)

    keys = [bucket.period_start.strftime(KEY_FORMAT) for bucket in buckets]
    totals = (
        frame.groupby("bucket")["value"]
        .agg(["sum", "count"])
        .reindex(keys, fill_value=0)
    )

    return [
        bucket.model_copy(update={"sum": float(row["sum"]), "count": int(row["count"])})
        for bucket, (_, row) in zip(buckets, totals.iterrows())
    ]


def aggregate(
    records: Iterable[VitalRecord],
    metric: Union[MetricKind, str],
    timeframe: Union[Timeframe, str],
    now: Optional[datetime] = None,
    tz: Union[tzinfo, str, None] = None,
) -> AggregationResult:
    """Average a metric per bucket over the trailing window.

    Args:
        records: Vitals records in any order (may be empty).
        metric: Temperature, Heart Rate or Blood Pressure (systolic).
        timeframe: daily (14 buckets), weekly (12) or monthly (6).
        now: Anchor instant (defaults to the current time).
        tz: Zone for bucket boundaries (defaults to settings.LOCAL_TIMEZONE).

    Returns:
        Labels and 2-decimal averages, one per bucket, oldest first. Buckets
        without readings report 0.
    """
    buckets = fill_buckets(records, metric, timeframe, now=now, tz=tz)
    return AggregationResult(
        labels=[bucket.period_label for bucket in buckets],
        values=[round(bucket.average, 2) for bucket in buckets],
    )

from datetime import datetime

import pytest

from common.aggregation import aggregate, bucket_count, build_buckets, fill_buckets
from common.models import MetricKind, Timeframe, VitalRecord


@pytest.mark.parametrize(
    "timeframe, expected",
    [(Timeframe.DAILY, 14), (Timeframe.WEEKLY, 12), (Timeframe.MONTHLY, 6)],
)
def test_empty_records_give_fixed_length_zeros(now, timeframe, expected):
    result = aggregate([], MetricKind.TEMPERATURE, timeframe, now=now, tz="UTC")

    assert len(result.values) == expected
    assert len(result.labels) == expected
    assert all(v == 0 for v in result.values)
    assert bucket_count(timeframe) == expected
    assert not result.has_real_data


def test_daily_labels_end_today(now):
    result = aggregate([], MetricKind.HEART_RATE, "daily", now=now, tz="UTC")

    assert result.labels[0] == "Nov 1"
    assert result.labels[-1] == "Nov 14"


def test_weekly_buckets_start_on_monday(now):
    buckets = build_buckets(Timeframe.WEEKLY, now=now, tz="UTC")

    assert all(b.period_start.weekday() == 0 for b in buckets)
    assert buckets[-1].period_start == datetime(2025, 11, 10)
    assert buckets[0].period_start == datetime(2025, 8, 25)
    assert buckets[0].period_label == "Aug 25"


def test_monthly_labels(now):
    result = aggregate([], MetricKind.BLOOD_PRESSURE, Timeframe.MONTHLY, now=now, tz="UTC")

    assert result.labels == ["Jun", "Jul", "Aug", "Sep", "Oct", "Nov"]


def test_monthly_window_crosses_year_boundary():
    buckets = build_buckets(Timeframe.MONTHLY, now=datetime(2026, 2, 3, 9, 0), tz="UTC")

    assert [b.period_start for b in buckets] == [
        datetime(2025, 9, 1),
        datetime(2025, 10, 1),
        datetime(2025, 11, 1),
        datetime(2025, 12, 1),
        datetime(2026, 1, 1),
        datetime(2026, 2, 1),
    ]


def test_weekly_systolic_scenario(now, make_record):
    records = [
        make_record("2025-11-01T09:00:00", systolic=120.0),
        make_record("2025-11-08T09:00:00", systolic=140.0),
    ]

    result = aggregate(records, MetricKind.BLOOD_PRESSURE, Timeframe.WEEKLY, now=now, tz="UTC")

    # Nov 1 falls in the week of Oct 27, Nov 8 in the week of Nov 3
    assert result.labels[9] == "Oct 27"
    assert result.labels[10] == "Nov 3"
    assert result.values[9] == 120
    assert result.values[10] == 140
    assert [v for i, v in enumerate(result.values) if i not in (9, 10)] == [0] * 10


def test_bucket_average_is_mean_of_readings(now, make_record):
    records = [
        make_record("2025-11-14T08:00:00", temperature=36.5),
        make_record("2025-11-14T09:00:00", temperature=37.0),
        make_record("2025-11-14T10:00:00", temperature=37.6),
    ]

    result = aggregate(records, MetricKind.TEMPERATURE, Timeframe.DAILY, now=now, tz="UTC")

    assert result.values[-1] == 37.03
    assert result.values[:-1] == [0] * 13


def test_missing_reading_does_not_shift_average(now, make_record):
    base = [
        make_record("2025-11-12T08:00:00", systolic=110.0, heart_rate=70.0),
        make_record("2025-11-12T09:00:00", systolic=130.0, heart_rate=80.0),
    ]
    with_gap = base + [make_record("2025-11-12T10:00:00", systolic=None, heart_rate=90.0)]

    before = aggregate(base, MetricKind.BLOOD_PRESSURE, Timeframe.DAILY, now=now, tz="UTC")
    after = aggregate(with_gap, MetricKind.BLOOD_PRESSURE, Timeframe.DAILY, now=now, tz="UTC")

    assert before.values == after.values
    assert after.values[-3] == 120

    buckets = fill_buckets(with_gap, MetricKind.BLOOD_PRESSURE, Timeframe.DAILY, now=now, tz="UTC")
    assert buckets[-3].count == 2


def test_nan_reading_is_absent(now):
    record = VitalRecord(timestamp=now, temperature=float("nan"), heart_rate=float("inf"))

    assert record.temperature is None
    assert record.heart_rate is None

    result = aggregate([record], MetricKind.TEMPERATURE, Timeframe.DAILY, now=now, tz="UTC")
    assert result.values == [0] * 14


def test_records_outside_window_are_dropped(now, make_record):
    records = [
        make_record("2025-10-01T08:00:00", heart_rate=200.0),
        make_record("2025-11-20T08:00:00", heart_rate=200.0),
        make_record("2025-11-13T08:00:00", heart_rate=75.0),
    ]

    result = aggregate(records, MetricKind.HEART_RATE, Timeframe.DAILY, now=now, tz="UTC")

    assert result.values[-2] == 75
    assert sum(result.values) == 75


def test_records_in_any_order(now, make_record):
    records = [
        make_record("2025-09-03T08:00:00", heart_rate=90.0),
        make_record("2025-11-02T08:00:00", heart_rate=60.0),
        make_record("2025-09-20T08:00:00", heart_rate=70.0),
        make_record("2025-11-30T08:00:00", heart_rate=60.0),
    ]

    forward = aggregate(records, MetricKind.HEART_RATE, Timeframe.MONTHLY, now=now, tz="UTC")
    backward = aggregate(list(reversed(records)), MetricKind.HEART_RATE, Timeframe.MONTHLY, now=now, tz="UTC")

    assert forward == backward
    assert forward.values == [0, 0, 0, 80, 0, 60]


def test_aggregate_is_idempotent(now, make_record):
    records = [
        make_record("2025-11-10T08:00:00", temperature=36.6),
        make_record("2025-11-11T08:00:00", temperature=37.9),
    ]

    first = aggregate(records, MetricKind.TEMPERATURE, Timeframe.WEEKLY, now=now, tz="UTC")
    second = aggregate(records, MetricKind.TEMPERATURE, Timeframe.WEEKLY, now=now, tz="UTC")

    assert first == second
    assert first.values[-1] == 37.25


def test_local_timezone_decides_the_day(now, make_record):
    # 03:30 UTC on Nov 14 is still Nov 13 in New York
    record = make_record("2025-11-14T03:30:00+00:00", heart_rate=72.0)

    utc = aggregate([record], MetricKind.HEART_RATE, Timeframe.DAILY, now=now, tz="UTC")
    local = aggregate([record], MetricKind.HEART_RATE, Timeframe.DAILY, now=now, tz="America/New_York")

    assert utc.values[-1] == 72
    assert local.values[-2] == 72
    assert local.labels[-2] == "Nov 13"


def test_naive_timestamps_are_treated_as_local(now):
    record = VitalRecord(timestamp=datetime(2025, 11, 14, 23, 45), heart_rate=88.0)

    result = aggregate([record], MetricKind.HEART_RATE, Timeframe.DAILY, now=now, tz="Asia/Manila")

    # now is Nov 14 20:00 in Manila, so 23:45 local is still today
    assert result.values[-1] == 88


def test_values_rounded_to_two_decimals(now, make_record):
    records = [
        make_record("2025-11-14T08:00:00", heart_rate=70.0),
        make_record("2025-11-14T09:00:00", heart_rate=71.0),
        make_record("2025-11-14T10:00:00", heart_rate=71.0),
    ]

    result = aggregate(records, MetricKind.HEART_RATE, Timeframe.DAILY, now=now, tz="UTC")

    assert result.values[-1] == 70.67


def test_invalid_inputs_raise():
    with pytest.raises(ValueError):
        aggregate([], MetricKind.HEART_RATE, "hourly")
    with pytest.raises(ValueError):
        aggregate([], "Oxygen", Timeframe.DAILY)
    with pytest.raises(ValueError):
        build_buckets(Timeframe.DAILY, tz="Mars/Olympus_Mons")

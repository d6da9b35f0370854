from datetime import datetime, timezone

import pytest

from common.models import VitalRecord


@pytest.fixture
def now():
    # Friday; the week containing it starts Monday 2025-11-10
    return datetime(2025, 11, 14, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_record():
    def _make(ts, **readings):
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts)
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=timezone.utc)
        return VitalRecord(timestamp=ts, **readings)

    return _make

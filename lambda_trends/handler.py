"""Lambda handler for building a vitals trend chart."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from common.config import settings
from common.events import parse_event, parse_now
from common.logging_utils import setup_logger
from common.models import MetricKind, Timeframe
from common.supabase_client import VitalsClient
from common.trends import build_trend

logger = setup_logger(__name__)

DEFAULT_METRIC = MetricKind.BLOOD_PRESSURE
DEFAULT_TIMEFRAME = Timeframe.MONTHLY


def _parse_dimension(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if number <= 0:
        raise ValueError(f"{name} must be positive, got {number}")
    return number


def handler(event: Dict[str, Any], context: Any, client: Optional[VitalsClient] = None) -> Dict[str, Any]:
    """Lambda handler for building a trend view.

    Expected event structure:
    {
        "student_id": "2021-00123",
        "metric": "Blood Pressure",   # Optional, Temperature | Heart Rate | Blood Pressure
        "timeframe": "monthly",       # Optional, daily | weekly | monthly
        "width": 340,                 # Optional, defaults to CHART_WIDTH
        "height": 180,                # Optional, defaults to CHART_HEIGHT
        "now": "2025-11-14T08:00:00Z" # Optional, defaults to the current time
    }

    Args:
        event: Lambda event dictionary.
        context: Lambda context object.
        client: Vitals client override (defaults to one built from settings).

    Returns:
        Dictionary with statusCode and a JSON body holding the trend view.
    """
    try:
        event = parse_event(event)

        student_id = event.get("student_id")
        if not student_id:
            raise ValueError(f"student_id must be provided in event. Event keys: {list(event.keys())}")

        try:
            metric = MetricKind(event.get("metric") or DEFAULT_METRIC)
            timeframe = Timeframe(event.get("timeframe") or DEFAULT_TIMEFRAME)
        except ValueError as e:
            raise ValueError(f"Invalid metric or timeframe: {e}")

        width = _parse_dimension(event.get("width"), "width")
        height = _parse_dimension(event.get("height"), "height")
        now = parse_now(event.get("now")) or datetime.now(timezone.utc)

        logger.info(f"Building {metric.value} {timeframe.value} trend for student {student_id}")

        client = client or VitalsClient()
        # Newest first so the row limit cuts off old history, not the trailing window
        records = client.fetch_student_records(student_id, limit=settings.VITALS_FETCH_LIMIT, ascending=False)

        view = build_trend(records, metric, timeframe, width=width, height=height, now=now)

        body = view.model_dump(mode="json")
        body["status"] = "success" if view.has_real_data else "empty"
        body["student_id"] = student_id

        return {
            "statusCode": 200,
            "body": json.dumps(body),
        }

    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return {
            "statusCode": 400,
            "body": json.dumps({
                "status": "error",
                "error": str(e),
            }),
        }
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return {
            "statusCode": 500,
            "body": json.dumps({
                "status": "error",
                "error": str(e),
            }),
        }

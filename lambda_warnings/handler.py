"""Lambda handler for abnormal-scan warnings."""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from common.alerts import compute_warnings, recent_scans, record_id, scanned_today
from common.events import parse_event, parse_now
from common.logging_utils import setup_logger
from common.supabase_client import VitalsClient
from common.thresholds import VitalThresholds

logger = setup_logger(__name__)

WARNINGS_FETCH_LIMIT = 100


def handler(event: Dict[str, Any], context: Any, client: Optional[VitalsClient] = None) -> Dict[str, Any]:
    """Lambda handler for listing a student's undismissed abnormal scans.

    Expected event structure:
    {
        "student_id": "2021-00123",
        "dismissed_ids": ["41", "57"],  # Optional, ids the student already acknowledged
        "now": "2025-11-14T08:00:00Z"   # Optional, defaults to the current time
    }

    Args:
        event: Lambda event dictionary.
        context: Lambda context object.
        client: Vitals client override (defaults to one built from settings).

    Returns:
        Dictionary with statusCode and a JSON body holding the warnings.
    """
    try:
        event = parse_event(event)

        student_id = event.get("student_id")
        if not student_id:
            raise ValueError(f"student_id must be provided in event. Event keys: {list(event.keys())}")

        dismissed = event.get("dismissed_ids") or []
        if not isinstance(dismissed, list):
            raise ValueError(f"dismissed_ids must be a list, got {type(dismissed).__name__}")
        dismissed_ids = frozenset(str(d) for d in dismissed)

        now = parse_now(event.get("now")) or datetime.now(timezone.utc)
        client = client or VitalsClient()
        records = client.fetch_student_records(student_id, limit=WARNINGS_FETCH_LIMIT, ascending=False)

        warnings = compute_warnings(records, dismissed_ids, VitalThresholds.from_settings())
        recent = recent_scans(records, now, dismissed_ids=dismissed_ids)

        logger.info(
            f"Student {student_id}: {len(warnings)} warning(s) from {len(records)} scans "
            f"({len(dismissed_ids)} dismissed)"
        )

        return {
            "statusCode": 200,
            "body": json.dumps({
                "status": "success",
                "student_id": student_id,
                "warnings": [w.model_dump(mode="json") for w in warnings],
                "recent_scan_ids": [record_id(r) for r in recent],
                "scanned_today": scanned_today(records, now),
            }),
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

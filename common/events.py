"""Parsing helpers for Lambda events shared by the handlers."""

import json
from datetime import datetime
from typing import Any, Dict, Optional

from .adapters import parse_timestamp


def parse_event(event: Any) -> Dict[str, Any]:
    """Unwrap API Gateway events (JSON string body) and check the payload shape.

    Raises:
        ValueError: If the event or its decoded body is not a JSON object.
    """
    if isinstance(event, dict) and isinstance(event.get("body"), str):
        try:
            event = json.loads(event["body"])
        except json.JSONDecodeError:
            raise ValueError("Request body is not valid JSON")

    if not isinstance(event, dict):
        raise ValueError(f"Event payload must be a JSON object, got {type(event).__name__}")
    return event


def parse_now(value: Any) -> Optional[datetime]:
    """Optional ISO 8601 anchor instant; None when absent."""
    if not value:
        return None
    try:
        return parse_timestamp(str(value))
    except ValueError:
        raise ValueError(f"Invalid now timestamp: {value!r}")

"""
Trigger event parsing for Lambda.

Events arrive either as the bare payload (step driver, async invoke) or
wrapped in an HTTP envelope whose ``body`` is a JSON string.
"""

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from itinerary_pipeline.core.ingestion.lambda_utils.exceptions import EventParseError

logger = logging.getLogger(__name__)

EventT = TypeVar("EventT", bound=BaseModel)


def unwrap_event(event: Any) -> dict[str, Any]:
    """Return the trigger payload, decoding an HTTP-style ``body`` if present."""
    if not isinstance(event, dict):
        raise EventParseError(f"Event must be an object, got {type(event).__name__}")
    if "body" not in event:
        return event
    body = event["body"]
    if isinstance(body, dict):
        return body
    if not body:
        raise EventParseError("Empty event body")
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        logger.error("unwrap_event - JSONDecodeError: %s", e)
        raise EventParseError(f"Invalid JSON in event body: {e}") from e
    if not isinstance(payload, dict):
        raise EventParseError("Event body must be a JSON object")
    return payload


def parse_event(event: Any, model: type[EventT]) -> EventT:
    """
    Parse and validate a trigger event.

    Raises:
        EventParseError: Malformed envelope or payload failing validation
    """
    payload = unwrap_event(event)
    try:
        parsed = model.model_validate(payload)
    except ValidationError as e:
        logger.error("parse_event - ValidationError for %s: %s", model.__name__, e)
        raise EventParseError(f"Invalid {model.__name__}: {e}") from e
    logger.info("parse_event - Parsed %s", model.__name__, extra={"event_fields": sorted(payload)})
    return parsed

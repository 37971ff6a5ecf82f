"""
Lambda handlers for the ingestion pipeline.

One handler per trigger, invoked by the external step driver:

- intake_handler: ``{jobId, sourceUrl, mode}`` → scrape, transform, seed
- image_processor_handler: ``{jobId, itineraryId, chunkIndex, processVideosOnly?}``
  → one media chunk; the driver re-invokes while ``remaining > 0``
- finalizer_handler: ``{jobId, itineraryId}`` → reconcile, link, complete

Environment variables:
- STORE_API_URL: Document store REST API base URL
- STORE_API_KEY or STORE_API_KEY_SECRET_ARN: Store credentials
- MEDIA_BUCKET: Owned media bucket
- LOG_LEVEL: Logging level

Dependencies: entrypoint, lambda_utils
System role: Lambda entry points for each pipeline phase
"""

import json
import logging
import os
from typing import Any, Callable, Dict

from dotenv import load_dotenv
from pydantic import BaseModel

from itinerary_pipeline.core.ingestion.entrypoint import IngestionPipeline
from itinerary_pipeline.core.ingestion.lambda_utils.config import configure_secrets, validate_environment
from itinerary_pipeline.core.ingestion.lambda_utils.event_parser import parse_event
from itinerary_pipeline.core.ingestion.lambda_utils.exceptions import ConfigurationError, EventParseError
from itinerary_pipeline.models.events import ChunkEvent, FinalizeEvent, IntakeEvent
from itinerary_pipeline.observability.logger import configure_logging

# Load environment variables from .env if present
load_dotenv()

configure_logging(os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

_pipeline: IngestionPipeline | None = None


def get_pipeline() -> IngestionPipeline:
    """Pipeline singleton, reused across warm invocations."""
    global _pipeline
    if _pipeline is None:
        configure_secrets()
        validate_environment()
        _pipeline = IngestionPipeline()
    return _pipeline


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}


def _run(
    name: str,
    event: Dict[str, Any],
    event_model: type[BaseModel],
    phase: Callable[[IngestionPipeline, Any], BaseModel],
) -> Dict[str, Any]:
    try:
        parsed = parse_event(event, event_model)
    except EventParseError as e:
        logger.warning("%s:%s - EventParseError: %s", __name__, name, e)
        return _response(400, {"success": False, "error": "Invalid event", "details": str(e)})

    try:
        pipeline = get_pipeline()
    except ConfigurationError as e:
        logger.error("%s:%s - ConfigurationError: %s", __name__, name, e)
        return _response(500, {"success": False, "error": str(e)})

    try:
        result = phase(pipeline, parsed)
    except Exception as e:  # pylint: disable=broad-except
        logger.error("%s:%s - %s: %s", __name__, name, type(e).__name__, e)
        return _response(
            500,
            {"success": False, "error": f"{type(e).__name__}", "details": str(e)},
        )

    body = {"success": True, **result.model_dump(mode="json", by_alias=True)}
    logger.info("%s:%s - Completed", __name__, name, extra={"result": body})
    return _response(200, body)


def intake_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Start ingestion for one portal URL.

    Args:
        event: Intake trigger (bare or HTTP-wrapped)
        context: Lambda context object

    Returns:
        Dict with statusCode and JSON body carrying the IntakeResult
    """
    return _run("intake_handler", event, IntakeEvent, lambda p, e: p.intake(e))


def image_processor_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Process one media chunk, or the video pass when ``processVideosOnly`` is set."""
    return _run("image_processor_handler", event, ChunkEvent, lambda p, e: p.process_media(e))


def finalizer_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return _run("finalizer_handler", event, FinalizeEvent, lambda p, e: p.finalize(e))

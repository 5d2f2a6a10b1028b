"""
AWS Lambda style handler for What's New Insights.

This module provides a JSON entry point around the news pipeline. It accepts
API Gateway proxy events or direct invocations carrying an optional ``limit``.
"""

import json
import time
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from .config.manager import get_system_config
from .config.models import SystemConfig
from .config.logging import configure_logging, get_logger
from .pipeline import NewsPipeline
from .postprocess.formatter import ResultFormatter


logger = get_logger(__name__)


class HandlerError(Exception):
    """Custom exception for handler-level errors."""

    def __init__(self, message: str, error_type: str = "HANDLER_ERROR", status_code: int = 500):
        super().__init__(message)
        self.error_type = error_type
        self.status_code = status_code


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Fetch the latest news items and return them as an API Gateway response.

    An empty listing is a successful response with ``count`` 0; the pipeline
    itself never raises.

    Args:
        event: API Gateway event or direct invocation payload
        context: Lambda runtime context

    Returns:
        API Gateway response format with status code and body
    """
    start_time = time.time()
    request_id = getattr(context, 'aws_request_id', None) or f"req_{int(start_time)}"
    logger.set_context(request_id=request_id, component="handler")

    try:
        config = get_system_config()
        configure_logging(config.log_level)
        limit = parse_limit(event or {}, config)

        logger.info("Processing request", limit=limit)

        with NewsPipeline(config) as pipeline:
            items = pipeline.run(limit)

        processing_time_ms = int((time.time() - start_time) * 1000)
        response = ResultFormatter().format_response(
            items,
            source=config.source.listing_url,
            processing_time_ms=processing_time_ms
        )

        if not items:
            logger.warning("No news items could be found", processing_time_ms=processing_time_ms)

        logger.log_metrics({
            "total_processing_time_ms": processing_time_ms,
            "items_returned": response.count,
            "limit": limit
        }, "lambda_execution")

        return create_api_response(200, response.to_dict())

    except HandlerError as e:
        logger.error("Handler error occurred", error=e)
        return create_api_response(e.status_code, create_error_response(str(e), e.error_type))

    except Exception as e:
        logger.error("Unexpected error in handler", error=e)
        return create_api_response(
            500,
            create_error_response(f"Internal server error: {str(e)}", "INTERNAL_ERROR")
        )


def parse_limit(event: Dict[str, Any], config: SystemConfig) -> int:
    """
    Read and validate the requested item count.

    The value is looked up in ``queryStringParameters``, then in the JSON
    body, then on the event itself.

    Raises:
        HandlerError: If the value is not an integer between 1 and ``max_limit``
    """
    raw: Optional[Any] = None

    query = event.get("queryStringParameters") or {}
    if "limit" in query:
        raw = query["limit"]
    elif event.get("body"):
        body = event["body"]
        if isinstance(body, str):
            try:
                body = json.loads(body)
            except json.JSONDecodeError as e:
                raise HandlerError(f"Invalid JSON in request body: {str(e)}", "VALIDATION_ERROR", 400)
        if isinstance(body, dict):
            raw = body.get("limit")
    else:
        raw = event.get("limit")

    if raw is None:
        return config.default_limit

    if isinstance(raw, bool):
        raise HandlerError("limit must be an integer", "VALIDATION_ERROR", 400)

    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise HandlerError("limit must be an integer", "VALIDATION_ERROR", 400)

    if not (1 <= limit <= config.max_limit):
        raise HandlerError(
            f"limit must be between 1 and {config.max_limit}",
            "VALIDATION_ERROR",
            400
        )

    return limit


def create_error_response(error_message: str, error_type: str = "PROCESSING_ERROR") -> Dict[str, Any]:
    """Create structured error response."""
    timestamp = datetime.now(timezone.utc).isoformat()
    return {
        "success": False,
        "error": {
            "type": error_type,
            "message": error_message,
            "timestamp": timestamp
        },
        "count": 0,
        "items": [],
        "timestamp": timestamp
    }


def create_api_response(status_code: int, body: Any) -> Dict[str, Any]:
    """
    Create API Gateway response format.

    Args:
        status_code: HTTP status code
        body: Response body (will be JSON serialized)

    Returns:
        API Gateway response format
    """
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": "GET,POST,OPTIONS"
        },
        "body": json.dumps(body, default=str, ensure_ascii=False)
    }

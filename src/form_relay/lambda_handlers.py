"""
AWS Lambda handler for the webhook relay.
Accepts API Gateway REST (v1) and HTTP API (v2) proxy events.
"""

import base64
from functools import lru_cache
from typing import Any

from loguru import logger


@lru_cache(maxsize=1)
def _get_handler():
    """Build the relay handler once per execution environment."""
    # Import inside handler for Lambda
    from form_relay.utils.logging import setup_logging
    from form_relay.webhooks.config import get_config
    from form_relay.webhooks.services import RelayHandlerFactory

    config = get_config()
    setup_logging("form-relay-lambda", config.log_level, enable_json=config.json_logs)
    return RelayHandlerFactory.create_handler(config)


def _event_method(event: dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = event.get("requestContext", {}).get("http", {}).get("method", "")
    return method


async def _event_body(event: dict[str, Any]):
    """Body as a one-chunk stream; decoding runs only if the handler reads it."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        yield base64.b64decode(body, validate=True)
    else:
        yield body.encode("utf-8")


def relay_handler(event: dict[str, Any], context: Any, handler=None) -> dict[str, Any]:
    """
    Lambda handler for relaying webhook events to the form endpoint.

    Args:
        event: API Gateway proxy event
        context: Lambda context
        handler: Relay handler override (tests)
    """
    import asyncio

    handler = handler or _get_handler()

    method = _event_method(event)
    headers = event.get("headers") or {}

    logger.info(f"Lambda relay request: {method}")

    result = asyncio.run(handler.handle(method, headers, _event_body(event)))

    response_headers = dict(result.headers)
    if result.body is not None:
        response_headers["Content-Type"] = "application/json"

    return {
        "statusCode": result.status_code,
        "headers": response_headers,
        "body": result.body_bytes().decode("utf-8"),
    }

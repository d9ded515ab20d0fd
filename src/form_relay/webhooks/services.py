"""
Service classes for webhook relaying.
The handler is framework independent; FastAPI and Lambda adapt it.
"""

import json
from collections.abc import AsyncIterable, Mapping
from typing import Any

import httpx

from ..core.error_handling import ErrorContext, log_error
from ..core.exceptions import (
    AuthenticationError,
    HTTPExceptionHandler,
    MethodNotAllowedError,
    create_malformed_body_error,
)
from ..infrastructure.external_apis import FormSubmissionClient
from ..utils.logging import get_logger
from .auth import is_authorized
from .config import RelayConfig
from .models import (
    DateComponent,
    DateSlot,
    ErrorBody,
    FieldMap,
    FormPayload,
    FormValue,
    HandlerResponse,
    HealthStatus,
    RelayAccepted,
    parse_iso_date,
)

logger = get_logger("webhook_relay")

CORS_ALLOW_METHODS = "POST, GET, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, Events-Webhook-Secret"

BodyStream = AsyncIterable[bytes] | bytes | str | None


def _to_form_value(value: Any) -> FormValue:
    """Render a JSON body value the way it should appear in the form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


class FormMapper:
    """Translates a webhook body into form fields using a field map."""

    def __init__(self, field_map: FieldMap):
        self.field_map = field_map

    def build_payload(self, body: Mapping[str, Any]) -> FormPayload:
        """
        Build the outgoing form payload for one request.

        Body keys without a map entry are dropped; map entries without a body
        value are skipped.
        """
        payload = FormPayload()

        for key, identifier in self.field_map.plain_entries():
            value = body.get(key)
            if value is not None:
                payload.append(identifier, _to_form_value(value))

        for slot in DateSlot:
            self._append_date(payload, slot, body.get(slot.value))

        return payload

    def _append_date(self, payload: FormPayload, slot: DateSlot, value: Any) -> None:
        """Append year, month and day entries for one date slot."""
        if not value:
            return

        parts = parse_iso_date(value)
        if parts is None:
            logger.warning(f"⚠️ Ignoring {slot.value}: expected yyyy-mm-dd")
            return

        year, month, day = parts
        for component, component_value in (
            (DateComponent.YEAR, year),
            (DateComponent.MONTH, month),
            (DateComponent.DAY, day),
        ):
            identifier = self.field_map.date_identifier(slot, component)
            if identifier:
                payload.append(identifier, component_value)


async def read_body(body_stream: BodyStream) -> bytes:
    """Read the request body to completion."""
    if body_stream is None:
        return b""
    if isinstance(body_stream, str):
        return body_stream.encode("utf-8")
    if isinstance(body_stream, (bytes, bytearray)):
        return bytes(body_stream)

    chunks = []
    async for chunk in body_stream:
        chunks.append(chunk)
    return b"".join(chunks)


def parse_json_body(raw: bytes) -> dict[str, Any]:
    """
    Parse the webhook body. An empty body is an empty object.

    Raises:
        MalformedBodyError: If the body is not a JSON object
    """
    if not raw.strip():
        return {}

    try:
        body = json.loads(raw)
    except ValueError as e:
        raise create_malformed_body_error(f"Invalid JSON body: {e}")

    if not isinstance(body, dict):
        raise create_malformed_body_error("Request body must be a JSON object")

    return body


class WebhookRelayHandler:
    """
    Authenticates webhook calls and relays their bodies to a form endpoint.

    Holds only immutable configuration; every payload is built from
    invocation-local state.
    """

    def __init__(
        self,
        webhook_secret: str,
        field_map: FieldMap,
        form_client: FormSubmissionClient,
    ):
        self.webhook_secret = (webhook_secret or "").strip()
        self.mapper = FormMapper(field_map)
        self.form_client = form_client

        if not self.webhook_secret:
            logger.warning("⚠️ No webhook secret configured; every POST will be rejected")

        logger.info(f"WebhookRelayHandler initialized with {len(field_map)} field map entries")

    async def handle(
        self,
        method: str,
        headers: Mapping[str, str],
        body_stream: BodyStream = None,
    ) -> HandlerResponse:
        """
        Handle one request.

        Args:
            method: HTTP method
            headers: Request headers (any case)
            body_stream: Async iterator of body chunks, raw bytes, or None

        Returns:
            Status code, headers and JSON body (None for an empty body)
        """
        headers = {name.lower(): value for name, value in headers.items()}
        cors_headers = {"Access-Control-Allow-Origin": headers.get("origin") or "*"}
        method = method.upper()

        if method == "OPTIONS":
            return HandlerResponse(
                status_code=200,
                headers={
                    **cors_headers,
                    "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
                    "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
                },
            )

        if method == "GET":
            return HandlerResponse(200, cors_headers, HealthStatus().model_dump())

        if method != "POST":
            return self._error_response(MethodNotAllowedError(), cors_headers)

        context = ErrorContext("relay", "webhook_relay", {"method": method})
        try:
            if not is_authorized(headers, self.webhook_secret):
                raise AuthenticationError()

            field_count = await self.relay(body_stream)

        except AuthenticationError as e:
            logger.warning("🔒 Rejected webhook with missing or invalid secret")
            return self._error_response(e, cors_headers)

        except Exception as e:
            log_error(e, context)
            return self._error_response(e, cors_headers)

        logger.info(f"✅ Relayed {field_count} form fields")
        return HandlerResponse(200, cors_headers, RelayAccepted().model_dump())

    async def relay(self, body_stream: BodyStream) -> int:
        """
        Parse, map and submit one body.

        Returns:
            Number of form fields submitted
        """
        body = parse_json_body(await read_body(body_stream))
        payload = self.mapper.build_payload(body)
        await self.form_client.submit(payload)
        return len(payload)

    @staticmethod
    def _error_response(exc: Exception, cors_headers: dict[str, str]) -> HandlerResponse:
        status_code, body = HTTPExceptionHandler.to_error_response(exc)
        return HandlerResponse(status_code, cors_headers, ErrorBody(**body).model_dump())


class RelayHandlerFactory:
    """Factory for creating relay handlers with proper dependency injection."""

    @staticmethod
    def create_handler(
        config: RelayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> WebhookRelayHandler:
        """
        Create a relay handler from configuration.

        Args:
            config: Relay configuration
            transport: Optional httpx transport for the form client

        Returns:
            Configured WebhookRelayHandler instance
        """
        form_client = FormSubmissionClient(
            action_url=config.form_action_url,
            timeout=config.form_timeout,
            transport=transport,
        )

        return WebhookRelayHandler(
            webhook_secret=config.webhook_secret,
            field_map=config.get_field_map(),
            form_client=form_client,
        )

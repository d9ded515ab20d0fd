"""
FastAPI adapter for the webhook relay handler.
Uses dependency injection and configuration-driven design.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request, Response
from loguru import logger

from ..core.middleware import RequestLoggingMiddleware
from .config import RelayConfig, get_config
from .models import HandlerResponse
from .services import RelayHandlerFactory, WebhookRelayHandler

# Every method reaches the handler so unsupported ones get its JSON 405
ROUTED_METHODS = ["GET", "POST", "OPTIONS", "PUT", "PATCH", "DELETE", "HEAD"]

SERVICE_VERSION = "1.0.0"


def to_starlette_response(result: HandlerResponse) -> Response:
    """Convert a handler response to a Starlette response."""
    headers = dict(result.headers)
    if result.body is not None:
        headers["Content-Type"] = "application/json; charset=utf-8"

    return Response(
        content=result.body_bytes(),
        status_code=result.status_code,
        headers=headers,
    )


def create_relay_router(handler: WebhookRelayHandler, path: str = "/api/events") -> APIRouter:
    """
    Create the relay router.

    Args:
        handler: Relay handler built once at startup
        path: Path the endpoint is served on

    Returns:
        Configured FastAPI router
    """
    router = APIRouter(tags=["webhooks"])

    @router.api_route(path, methods=ROUTED_METHODS, include_in_schema=True)
    async def relay_events(request: Request) -> Response:
        """
        Relay a webhook to the form endpoint.

        OPTIONS answers CORS preflight, GET is a health check, POST relays.
        """
        result = await handler.handle(request.method, request.headers, request.stream())
        return to_starlette_response(result)

    return router


def create_standalone_app(config: RelayConfig | None = None, transport=None) -> FastAPI:
    """
    Create standalone FastAPI app for the relay service.
    Uses configuration from the environment if none is provided.

    Args:
        config: Relay configuration (defaults to environment)
        transport: Optional httpx transport for the form client

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()

    app = FastAPI(
        title="Form Relay",
        description="Authenticated webhook to form submission relay",
        version=SERVICE_VERSION,
        docs_url="/docs" if config.debug else None,
        redoc_url=None,
    )

    app.add_middleware(RequestLoggingMiddleware)

    handler = RelayHandlerFactory.create_handler(config, transport=transport)
    app.include_router(create_relay_router(handler, config.endpoint_path))

    logger.info(f"✅ Relay endpoint mounted at {config.endpoint_path}")

    @app.get("/")
    async def root():
        """Root endpoint with service information."""
        return {
            "service": "form-relay",
            "version": SERVICE_VERSION,
            "endpoint": config.endpoint_path,
            "configuration": {
                "form_url_configured": bool(config.form_action_url),
                "secret_configured": bool(config.webhook_secret),
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def create_app() -> FastAPI:
    """Uvicorn factory entry point (``uvicorn --factory``)."""
    return create_standalone_app()

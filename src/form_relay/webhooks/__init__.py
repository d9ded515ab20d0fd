"""
Webhook relay package for Form Relay.
Authenticates webhook calls and relays their bodies to a form endpoint.
"""

from .models import FieldMap, FormPayload, HandlerResponse
from .services import FormMapper, RelayHandlerFactory, WebhookRelayHandler

__all__ = [
    "FieldMap",
    "FormPayload",
    "HandlerResponse",
    "FormMapper",
    "RelayHandlerFactory",
    "WebhookRelayHandler",
]

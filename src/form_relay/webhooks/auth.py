"""
Shared-secret authentication for inbound webhooks.
"""

import hmac
from collections.abc import Mapping

SECRET_HEADER = "events-webhook-secret"
AUTHORIZATION_HEADER = "authorization"
BEARER_PREFIX = "Bearer "


def extract_provided_secret(headers: Mapping[str, str]) -> str:
    """
    Credential presented by the caller.

    The ``Events-Webhook-Secret`` header wins; a ``Bearer`` token is only
    used when that header is absent or blank. Header names must already be
    lower-cased.
    """
    custom = (headers.get(SECRET_HEADER) or "").strip()
    if custom:
        return custom

    authorization = headers.get(AUTHORIZATION_HEADER) or ""
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip()

    return ""


def is_authorized(headers: Mapping[str, str], expected_secret: str) -> bool:
    """True when the provided credential is non-empty and equals the secret."""
    provided = extract_provided_secret(headers)
    if not provided or not expected_secret:
        return False

    return hmac.compare_digest(provided.encode("utf-8"), expected_secret.encode("utf-8"))

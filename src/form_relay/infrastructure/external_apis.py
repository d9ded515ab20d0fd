"""
External form submission client.
Uses httpx for async HTTP operations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx
from loguru import logger

from ..core.exceptions import ConfigurationError, create_upstream_error

if TYPE_CHECKING:
    from ..webhooks.models import FormPayload

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Upstream error pages can be large HTML documents
MAX_ERROR_BODY_CHARS = 500


@dataclass
class FormAPIConfig:
    """Configuration for the form submission client."""

    action_url: str | None
    timeout: float = 30.0


class FormSubmissionClient:
    """
    Async client that posts URL-encoded payloads to a form endpoint.

    A fresh ``httpx.AsyncClient`` is opened per submission so that
    concurrent relays share no connection state.
    """

    def __init__(
        self,
        action_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize form submission client.

        Args:
            action_url: Form submission URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.config = FormAPIConfig(action_url=action_url, timeout=timeout)
        self._transport = transport

        if not self.config.action_url:
            logger.warning("Form submission client created without a form URL")

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"User-Agent": "Form-Relay/1.0"},
            timeout=httpx.Timeout(self.config.timeout),
            follow_redirects=True,
            transport=self._transport,
        )

    async def submit(self, payload: FormPayload) -> httpx.Response:
        """
        Submit a payload to the form endpoint.

        Args:
            payload: Mapped form fields

        Returns:
            The successful upstream response

        Raises:
            ConfigurationError: If no form URL is configured
            UpstreamError: If the form endpoint answers with a non-2xx status
            httpx.RequestError: If the form endpoint cannot be reached
        """
        if not self.config.action_url:
            raise ConfigurationError(
                message="Form action URL is not configured",
                error_code="FORM_URL_MISSING",
            )

        logger.debug(f"Submitting {len(payload)} form fields")

        async with self._build_client() as client:
            response = await client.post(
                self.config.action_url,
                content=payload.encode(),
                headers={"Content-Type": FORM_CONTENT_TYPE},
            )

            if not response.is_success:
                try:
                    body_text = response.text.strip()[:MAX_ERROR_BODY_CHARS]
                except (UnicodeDecodeError, httpx.ResponseNotRead):
                    body_text = ""

                logger.error(f"❌ Form endpoint rejected submission: HTTP {response.status_code}")
                raise create_upstream_error(response.status_code, body_text)

        logger.debug(f"Form endpoint accepted submission: HTTP {response.status_code}")
        return response

import json
from typing import Any
from urllib.parse import parse_qsl

import httpx
import pytest

from form_relay.webhooks.config import RelayConfig
from form_relay.webhooks.services import RelayHandlerFactory, WebhookRelayHandler

SECRET = "s3cret-token"
FORM_URL = "https://forms.example.com/d/e/abc/formResponse"


class RecordingForm:
    """Fake form endpoint that records every submission."""

    def __init__(self, status_code: int = 200, text: str = "Thanks!"):
        self.status_code = status_code
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.text)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def submitted_pairs(self, index: int = -1) -> list[tuple[str, str]]:
        return parse_qsl(self.requests[index].content.decode("utf-8"))


@pytest.fixture
def field_map_entries() -> dict[str, Any]:
    """Field map shaped like a Google Form entry map."""
    return {
        "title": "entry.1001",
        "organizer": "entry.1002",
        "attendees": "entry.1003",
        "date_year": "entry.2001_year",
        "date_month": "entry.2001_month",
        "date_day": "entry.2001_day",
        "deadline_year": "entry.3001_year",
        "deadline_month": "entry.3001_month",
    }


@pytest.fixture
def relay_config(field_map_entries) -> RelayConfig:
    return RelayConfig(
        _env_file=None,
        webhook_secret=SECRET,
        form_entry_map_json=json.dumps(field_map_entries),
        form_action_url=FORM_URL,
    )


@pytest.fixture
def form() -> RecordingForm:
    return RecordingForm()


@pytest.fixture
def handler(relay_config, form) -> WebhookRelayHandler:
    return RelayHandlerFactory.create_handler(relay_config, transport=form.transport)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Events-Webhook-Secret": SECRET, "Origin": "https://calendar.example.com"}

import json

import pytest
from fastapi.testclient import TestClient

from conftest import SECRET, RecordingForm
from form_relay.webhooks.api import create_standalone_app


class TestRelayAPI:
    """Test the FastAPI surface of the relay."""

    @pytest.fixture
    def client(self, relay_config, form) -> TestClient:
        app = create_standalone_app(relay_config, transport=form.transport)
        return TestClient(app)

    def test_routes_registered(self, client) -> None:
        paths = [route.path for route in client.app.routes]
        assert "/api/events" in paths
        assert "/" in paths

    def test_preflight(self, client) -> None:
        response = client.options(
            "/api/events",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "https://app.example.com"
        assert response.headers["access-control-allow-methods"] == "POST, GET, OPTIONS"
        assert "Events-Webhook-Secret" in response.headers["access-control-allow-headers"]

    def test_health(self, client) -> None:
        response = client.get("/api/events")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert "x-request-id" in response.headers

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_method_not_allowed(self, client, method) -> None:
        response = client.request(method, "/api/events", headers={"Origin": "https://a.example"})

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
        assert response.headers["access-control-allow-origin"] == "https://a.example"

    def test_post_unauthorized(self, client, form) -> None:
        response = client.post("/api/events", json={"title": "x"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid secret"}
        assert response.headers["access-control-allow-origin"] == "*"
        assert form.requests == []

    def test_post_relays_to_form(self, client, form) -> None:
        response = client.post(
            "/api/events",
            content=json.dumps({"title": "Launch", "date": "2024-03-07"}),
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {SECRET}"},
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert form.submitted_pairs() == [
            ("entry.1001", "Launch"),
            ("entry.2001_year", "2024"),
            ("entry.2001_month", "3"),
            ("entry.2001_day", "07"),
        ]

    def test_post_upstream_failure(self, relay_config) -> None:
        form = RecordingForm(status_code=400, text="Bad entry")
        client = TestClient(create_standalone_app(relay_config, transport=form.transport))

        response = client.post(
            "/api/events",
            json={"title": "x"},
            headers={"Events-Webhook-Secret": SECRET, "Origin": "https://a.example"},
        )

        assert response.status_code == 500
        assert "400" in response.json()["error"]
        assert response.headers["access-control-allow-origin"] == "https://a.example"

    def test_root_service_info(self, client) -> None:
        data = client.get("/").json()
        assert data["service"] == "form-relay"
        assert data["endpoint"] == "/api/events"
        assert data["configuration"]["secret_configured"] is True

    def test_custom_endpoint_path(self, relay_config, form) -> None:
        config = relay_config.model_copy(update={"endpoint_path": "/hooks/form"})
        client = TestClient(create_standalone_app(config, transport=form.transport))

        assert client.get("/hooks/form").json() == {"status": "ok"}
        assert client.get("/api/events").status_code == 404

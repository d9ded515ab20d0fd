import base64
import json

import pytest

from conftest import SECRET
from form_relay.lambda_handlers import relay_handler


def rest_event(method: str, body: str | None = None, headers: dict | None = None, **extra) -> dict:
    return {"httpMethod": method, "headers": headers, "body": body, **extra}


def http_api_event(method: str, body: str | None = None, headers: dict | None = None) -> dict:
    return {
        "version": "2.0",
        "requestContext": {"http": {"method": method}},
        "headers": headers or {},
        "body": body,
    }


class TestLambdaRelayHandler:
    """Test the API Gateway adapter."""

    def test_rest_api_post(self, handler, form) -> None:
        event = rest_event(
            "POST",
            json.dumps({"title": "Launch"}),
            {"events-webhook-secret": SECRET, "origin": "https://a.example"},
        )

        response = relay_handler(event, None, handler=handler)

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"ok": True}
        assert response["headers"]["Access-Control-Allow-Origin"] == "https://a.example"
        assert response["headers"]["Content-Type"] == "application/json"
        assert form.submitted_pairs() == [("entry.1001", "Launch")]

    def test_http_api_base64_body(self, handler, form) -> None:
        raw = json.dumps({"date": "2024-03-07"}).encode()
        event = http_api_event(
            "POST", base64.b64encode(raw).decode(), {"authorization": f"Bearer {SECRET}"}
        )
        event["isBase64Encoded"] = True

        response = relay_handler(event, None, handler=handler)

        assert response["statusCode"] == 200
        assert form.submitted_pairs() == [
            ("entry.2001_year", "2024"),
            ("entry.2001_month", "3"),
            ("entry.2001_day", "07"),
        ]

    def test_bad_base64_is_server_error(self, handler, form) -> None:
        event = rest_event(
            "POST", "!!not base64!!", {"events-webhook-secret": SECRET}, isBase64Encoded=True
        )

        response = relay_handler(event, None, handler=handler)

        assert response["statusCode"] == 500
        assert "error" in json.loads(response["body"])
        assert form.requests == []

    def test_options_has_empty_body(self, handler) -> None:
        response = relay_handler(rest_event("OPTIONS"), None, handler=handler)

        assert response["statusCode"] == 200
        assert response["body"] == ""
        assert "Content-Type" not in response["headers"]
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.parametrize(
        "event, status",
        [
            (rest_event("GET"), 200),
            (http_api_event("DELETE"), 405),
            (rest_event("POST", "{}", {"events-webhook-secret": "wrong"}), 401),
        ],
    )
    def test_status_codes(self, handler, event, status) -> None:
        assert relay_handler(event, None, handler=handler)["statusCode"] == status

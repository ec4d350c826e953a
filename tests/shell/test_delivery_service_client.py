"""Tests for the delivery sub-service client.

Uses the `responses` library to mock HTTP requests.
"""

import json
from datetime import datetime, timezone

import requests
import responses

from geoalert.core.alert import Alert, Recipient
from geoalert.shell.delivery_service_client import (
    DeliveryServiceClient,
    build_request_body,
)


BASE_URL = "https://delivery.example.com"
SEND_URL = f"{BASE_URL}/send-emergency-alert"

ALERT = Alert(
    id="storm-3",
    title="Cyclone warning",
    description="Landfall expected tonight",
    severity="warning",
    type="storm",
    location="Visakhapatnam",
    timestamp=datetime(2024, 10, 2, 18, 30, tzinfo=timezone.utc),
    source="IMD",
    zone="nearby",
    radius_km=25,
)

RECIPIENTS = [
    Recipient(phone="+919800000001", language="te"),
    Recipient(email="b@example.com"),
]

OK_BODY = {
    "success": True,
    "sent": 2,
    "failed": 0,
    "errors": [],
    "zone": "nearby",
    "radius": 25,
    "config": {"smsEnabled": True, "emailEnabled": True},
    "message": "Nearby zone alert: 2 delivered, 0 failed",
}


class TestBuildRequestBody:
    """Tests for build_request_body()."""

    def test_drops_absent_addresses(self):
        """Recipients carry only the fields they have."""
        body = build_request_body(ALERT, RECIPIENTS)

        assert body["recipients"] == [
            {"phone": "+919800000001", "language": "te"},
            {"email": "b@example.com", "language": "en"},
        ]
        assert body["alert"]["zone"] == "nearby"
        assert body["alert"]["radius"] == 25


class TestDeliveryServiceClient:
    """Tests for DeliveryServiceClient.send_alert()."""

    @responses.activate
    def test_successful_call_returns_body(self):
        """HTTP 200 with JSON returns the parsed body."""
        responses.add(responses.POST, SEND_URL, json=OK_BODY, status=200)

        client = DeliveryServiceClient(BASE_URL + "/")
        result = client.send_alert(ALERT, RECIPIENTS)

        assert result.success is True
        assert result.status_code == 200
        assert result.body == OK_BODY
        assert result.error is None

    @responses.activate
    def test_sends_json_payload(self):
        """Request body is the alert and recipient list."""
        responses.add(responses.POST, SEND_URL, json=OK_BODY, status=200)

        DeliveryServiceClient(BASE_URL).send_alert(ALERT, RECIPIENTS)

        request = responses.calls[0].request
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.body) == build_request_body(ALERT, RECIPIENTS)

    @responses.activate
    def test_server_error_returns_failure(self):
        """Non-200 responses are failures with status and text."""
        responses.add(
            responses.POST, SEND_URL,
            json={"success": False, "error": "boom", "sent": 0, "failed": 0},
            status=500,
        )

        result = DeliveryServiceClient(BASE_URL).send_alert(ALERT, RECIPIENTS)

        assert result.success is False
        assert result.status_code == 500
        assert result.error.startswith("Delivery service error: 500")
        assert "boom" in result.error

    @responses.activate
    def test_invalid_json_returns_failure(self):
        """A 200 without JSON is a failure."""
        responses.add(responses.POST, SEND_URL, body="<html>ok</html>", status=200)

        result = DeliveryServiceClient(BASE_URL).send_alert(ALERT, RECIPIENTS)

        assert result.success is False
        assert result.error == "Delivery service returned invalid JSON"

    @responses.activate
    def test_timeout_returns_failure(self):
        """Timeouts are failures with status 0."""
        responses.add(responses.POST, SEND_URL, body=requests.Timeout("read timed out"))

        result = DeliveryServiceClient(BASE_URL).send_alert(ALERT, RECIPIENTS)

        assert result.success is False
        assert result.status_code == 0
        assert result.error == "Delivery service request timed out"

    @responses.activate
    def test_connection_error_returns_failure(self):
        """Connection errors are failures with status 0."""
        responses.add(responses.POST, SEND_URL, body=requests.ConnectionError("refused"))

        result = DeliveryServiceClient(BASE_URL).send_alert(ALERT, RECIPIENTS)

        assert result.success is False
        assert result.status_code == 0
        assert result.error == "Delivery service request failed: refused"

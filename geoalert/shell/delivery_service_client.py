"""Delivery Sub-service Client - Imperative Shell.

This module hands a batch of recipients to the remote delivery
sub-service (POST /send-emergency-alert). All I/O is contained here;
the alert wire format comes from the core module.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from geoalert.core.alert import Alert, Recipient, alert_to_dict


logger = logging.getLogger(__name__)


# Default timeout for sub-service requests (seconds)
DEFAULT_TIMEOUT = 60

SEND_PATH = "/send-emergency-alert"


@dataclass
class DeliveryServiceResponse:
    """Response from the delivery sub-service.

    Attributes:
        success: Whether the call itself succeeded (HTTP 200 with JSON)
        status_code: HTTP status code (0 if no response)
        body: Parsed response body when successful
        error: Error message if the call failed
    """
    success: bool
    status_code: int
    body: dict[str, Any] | None = None
    error: str | None = None


def build_request_body(alert: Alert, recipients: list[Recipient]) -> dict[str, Any]:
    """Build the sub-service request body.

    Pure function.
    """
    return {
        "alert": alert_to_dict(alert),
        "recipients": [
            {
                key: value
                for key, value in (
                    ("phone", r.phone),
                    ("email", r.email),
                    ("language", r.language),
                )
                if value is not None
            }
            for r in recipients
        ],
    }


class DeliveryServiceClient:
    """Client for the remote delivery sub-service.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(self, base_url: str, timeout: int = DEFAULT_TIMEOUT) -> None:
        """Initialize delivery sub-service client.

        Args:
            base_url: Sub-service base URL
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def send_alert(self, alert: Alert, recipients: list[Recipient]) -> DeliveryServiceResponse:
        """Deliver one alert variant to a batch of recipients.

        This method performs HTTP I/O.

        Args:
            alert: Alert variant (zone-tagged or direct)
            recipients: Recipients in submission order

        Returns:
            DeliveryServiceResponse indicating success or failure
        """
        url = f"{self.base_url}{SEND_PATH}"
        logger.info(
            "Sending %s alert to delivery service for %d recipients",
            alert.zone or "direct", len(recipients),
        )

        try:
            response = requests.post(
                url,
                json=build_request_body(alert, recipients),
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )

            if response.status_code == 200:
                try:
                    body = response.json()
                except ValueError:
                    logger.error("Delivery service returned invalid JSON")
                    return DeliveryServiceResponse(
                        success=False,
                        status_code=response.status_code,
                        error="Delivery service returned invalid JSON",
                    )

                logger.info("Delivery service accepted batch")
                return DeliveryServiceResponse(
                    success=True,
                    status_code=response.status_code,
                    body=body,
                )
            else:
                error_text = response.text
                logger.warning(
                    "Delivery service returned non-200: %d - %s",
                    response.status_code,
                    error_text,
                )
                return DeliveryServiceResponse(
                    success=False,
                    status_code=response.status_code,
                    error=f"Delivery service error: {response.status_code} {error_text}",
                )

        except requests.Timeout:
            logger.error("Delivery service request timed out")
            return DeliveryServiceResponse(
                success=False,
                status_code=0,
                error="Delivery service request timed out",
            )
        except requests.RequestException as e:
            logger.error("Delivery service request failed: %s", str(e))
            return DeliveryServiceResponse(
                success=False,
                status_code=0,
                error=f"Delivery service request failed: {e}",
            )
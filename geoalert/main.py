"""Cloud Function Entry Point.

This module provides the entry points for Google Cloud Functions.
They are thin wrappers that parse the request, load configuration and
invoke the orchestrator.

Request body (HTTP) or message data (Pub/Sub):
    {"alert": {...}}                     zoned distribution
    {"alert": {...}, "recipients": [...]}  direct distribution
"""

import base64
import binascii
import json
import logging
import os
from typing import Any

import functions_framework
from flask import Request

from geoalert.core.alert import parse_alert, parse_recipients
from geoalert.core.config import validate_config
from geoalert.core.errors import RequestError
from geoalert.orchestrator import DistributionResult, Orchestrator
from geoalert.shell.config_loader import load_config


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _get_orchestrator() -> Orchestrator:
    """Load and validate configuration, then build the orchestrator."""
    config = load_config()

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    for error in validation.critical_errors:
        logger.error("Config %s: %s", error.field, error.message)

    return Orchestrator(config)


def _run(payload: Any) -> DistributionResult:
    """Parse a request payload and run the matching distribution mode.

    Raises:
        RequestError: If the payload is malformed
    """
    if not isinstance(payload, dict) or "alert" not in payload:
        raise RequestError("Request must be a JSON object with an 'alert' field")

    alert = parse_alert(payload["alert"])
    orchestrator = _get_orchestrator()

    if "recipients" in payload:
        recipients = parse_recipients(payload["recipients"])
        return orchestrator.distribute_direct(alert, recipients)

    return orchestrator.distribute(alert)


def _status(result: DistributionResult) -> tuple[str, int]:
    if result.directory_error:
        return "directory_unavailable", 503
    if result.success:
        return "success", 200
    return "partial_failure", 207  # 207 = Multi-Status


def _build_response(result: DistributionResult) -> dict[str, Any]:
    report = result.report
    status, _ = _status(result)
    response = {
        "status": status,
        "summary": result.summary,
        "alert_id": result.alert.id,
        "zones": [
            {
                "zone": d.zone.kind,
                "radius": d.zone.radius_km,
                "severity": d.zone.severity,
                "recipients": len(d.recipients),
            }
            for d in result.distributions
        ],
        "sent": report.delivered,
        "failed": report.failed,
        "errors": [
            {"channel": e.channel, "recipient": e.recipient, "reason": e.reason}
            for e in report.errors
        ],
        "config": {
            "smsEnabled": report.sms_enabled,
            "emailEnabled": report.email_enabled,
        },
    }
    if result.directory_error:
        response["directory_error"] = result.directory_error
    return response


@functions_framework.http
def distribute_alert(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP Cloud Function entry point.

    Args:
        request: Flask request object with a JSON body

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Received distribution request")

    try:
        result = _run(request.get_json(silent=True))

        _, status_code = _status(result)
        return _build_response(result), status_code

    except RequestError as e:
        logger.warning("Rejected distribution request: %s", str(e))
        return {
            "status": "error",
            "message": str(e),
        }, 400

    except Exception as e:
        logger.exception("Unexpected error in alert distribution")
        return {
            "status": "error",
            "message": str(e),
        }, 500


@functions_framework.cloud_event
def distribute_alert_pubsub(cloud_event: Any) -> None:
    """Pub/Sub Cloud Function entry point.

    Malformed messages are logged and dropped. Unexpected errors and an
    unreadable subscriber directory are raised so the message is
    redelivered.

    Args:
        cloud_event: CloudEvent from Pub/Sub
    """
    logger.info("Received distribution request (Pub/Sub trigger)")

    try:
        data = cloud_event.data["message"]["data"]
        payload = json.loads(base64.b64decode(data).decode("utf-8"))
    except (KeyError, TypeError, ValueError, binascii.Error) as e:
        logger.error("Dropping undecodable Pub/Sub message: %s", str(e))
        return

    try:
        result = _run(payload)
    except RequestError as e:
        logger.error("Dropping malformed distribution request: %s", str(e))
        return

    logger.info("Completed: %s", result.summary)

    for error in result.report.errors:
        logger.error("Error: %s %s: %s", error.channel, error.recipient, error.reason)

    # Nothing was sent, so redelivery cannot duplicate messages
    if result.directory_error:
        raise RuntimeError(result.directory_error)

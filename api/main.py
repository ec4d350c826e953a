"""Emergency Alert Delivery API - FastAPI delivery sub-service.

Delivers one alert (zone-tagged or direct) to a batch of recipients over
SMS and email and returns an itemized delivery report. Deployed as a
single Cloud Run service; channel credentials come from the environment.
"""

import logging
import os
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from geoalert.core.alert import parse_alert, parse_recipients
from geoalert.core.delivery import report_to_response
from geoalert.core.errors import RequestError
from geoalert.dispatcher import Dispatcher
from geoalert.shell.config_loader import load_email_settings_from_env, load_sms_settings_from_env

log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Emergency Alert Delivery API",
    description="Delivers emergency alerts to recipients over SMS and email",
    version="1.0.0",
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["*"],
)


# ===== Request Models =====

class CoordinatesModel(BaseModel):
    lat: float
    lng: float


class LocalizedContentModel(BaseModel):
    title: str
    description: str


class AlertModel(BaseModel):
    id: str
    title: str
    description: str
    severity: str
    type: str
    location: str
    timestamp: str | int | float
    source: str
    coordinates: CoordinatesModel | None = None
    languages: dict[str, LocalizedContentModel] | None = None
    magnitude: float | None = None
    zone: str | None = None
    radius: int | None = None


class RecipientModel(BaseModel):
    phone: str | None = None
    email: str | None = None
    language: str = "en"


class SendAlertRequest(BaseModel):
    recipients: list[RecipientModel]
    alert: AlertModel


# ===== Dependencies =====

def get_dispatcher() -> Dispatcher:
    """Build a dispatcher from the current environment."""
    max_concurrency = os.environ.get("MAX_CONCURRENCY")
    return Dispatcher(
        load_sms_settings_from_env(),
        load_email_settings_from_env(),
        max_concurrency=int(max_concurrency) if max_concurrency else None,
    )


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": message, "sent": 0, "failed": 0},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or unparseable request bodies."""
    logger.warning("Rejected malformed request: %s", exc.errors())
    return _error_response("Invalid request body")


@app.exception_handler(RequestError)
async def request_error_handler(request: Request, exc: RequestError) -> JSONResponse:
    """Requests that parse but describe an invalid alert."""
    logger.warning("Rejected invalid alert: %s", str(exc))
    return _error_response(str(exc))


# ===== Endpoints =====

@app.post("/send-emergency-alert")
def send_emergency_alert(
    payload: SendAlertRequest,
    dispatcher: Dispatcher = Depends(get_dispatcher),
) -> dict[str, Any]:
    """Deliver an alert to a batch of recipients.

    Partial delivery failure is a 200 with a non-zero failed count.
    """
    alert = parse_alert(payload.alert.model_dump(exclude_none=True))
    recipients = parse_recipients([r.model_dump() for r in payload.recipients])

    logger.info(
        "Delivering %s alert %s to %d recipients",
        alert.zone or "direct", alert.id, len(recipients),
    )

    report = dispatcher.dispatch_direct(alert, recipients)
    response = report_to_response(report, alert)

    logger.info(response["message"])
    return response


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}

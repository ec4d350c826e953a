"""Alert data models and parsing - Pure functions.

This module handles parsing distribution request payloads into typed
Alert and Recipient objects. All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from geoalert.core.errors import RequestError
from geoalert.core.geo import ZONE_KINDS, Coordinates, validate_coordinates
from geoalert.core.severity import validate_severity


ALERT_TYPES = ("earthquake", "flood", "fire", "storm", "other")

# Base language used when no localized entry exists
BASE_LANGUAGE = "en"

REQUIRED_ALERT_FIELDS = (
    "id",
    "title",
    "description",
    "severity",
    "type",
    "location",
    "timestamp",
    "source",
)


@dataclass(frozen=True)
class LocalizedContent:
    """Localized title and description for one language."""
    title: str
    description: str


@dataclass(frozen=True)
class Alert:
    """Immutable emergency alert.

    Zone-tagged variants are derived with dataclasses.replace and carry
    zone and radius_km; base alerts leave both unset.

    Attributes:
        id: Unique alert ID
        title: Base-language (English) title
        description: Base-language description
        severity: critical, warning or info
        type: earthquake, flood, fire, storm or other
        location: Human-readable location text
        timestamp: Event timestamp (UTC)
        source: Issuing authority
        coordinates: Epicenter, if known
        languages: Localized content keyed by language code
        magnitude: Earthquake magnitude (optional)
        zone: Zone kind for zone-tagged variants
        radius_km: Zone radius for zone-tagged variants
    """
    id: str
    title: str
    description: str
    severity: str
    type: str
    location: str
    timestamp: datetime
    source: str
    coordinates: Coordinates | None = None
    languages: dict[str, LocalizedContent] = field(default_factory=dict)
    magnitude: float | None = None
    zone: str | None = None
    radius_km: int | None = None


@dataclass(frozen=True)
class Recipient:
    """A delivery target with at most one phone and one email.

    Attributes:
        phone: Phone number in E.164 format
        email: Email address
        language: Preferred language code
    """
    phone: str | None = None
    email: str | None = None
    language: str = BASE_LANGUAGE


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ISO-8601 string or epoch milliseconds into a UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise RequestError(f"Invalid alert timestamp: {value!r}")
    else:
        raise RequestError(f"Invalid alert timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_coordinates(data: Any) -> Coordinates | None:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise RequestError("Alert coordinates must be an object with lat and lng")
    try:
        coordinates = Coordinates(lat=float(data["lat"]), lng=float(data["lng"]))
    except (KeyError, TypeError, ValueError):
        raise RequestError("Alert coordinates must have numeric lat and lng")
    return validate_coordinates(coordinates)


def _parse_languages(data: Any) -> dict[str, LocalizedContent]:
    if not data:
        return {}
    if not isinstance(data, dict):
        raise RequestError("Alert languages must be an object keyed by language code")

    languages = {}
    for code, content in data.items():
        if not isinstance(content, dict):
            raise RequestError(f"Localized content for '{code}' must be an object")
        languages[code] = LocalizedContent(
            title=str(content.get("title", "")),
            description=str(content.get("description", "")),
        )
    return languages


def parse_alert(data: dict[str, Any]) -> Alert:
    """Parse an alert payload into an Alert.

    Pure function. Unlike lenient feed parsing, a malformed alert is a
    request error: the whole run is rejected.

    Args:
        data: Alert dict (wire format; "radius" maps to radius_km)

    Returns:
        Alert object

    Raises:
        RequestError: If required fields are missing or invalid
    """
    if not isinstance(data, dict):
        raise RequestError("Alert must be a JSON object")

    missing = [f for f in REQUIRED_ALERT_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise RequestError(f"Alert missing required fields: {', '.join(missing)}")

    severity = validate_severity(str(data["severity"]))

    alert_type = str(data["type"])
    if alert_type not in ALERT_TYPES:
        raise RequestError(
            f"Unknown alert type '{alert_type}', expected one of {', '.join(ALERT_TYPES)}"
        )

    zone = data.get("zone")
    if zone is not None and zone not in ZONE_KINDS:
        raise RequestError(f"Unknown zone '{zone}'")

    radius = data.get("radius", data.get("radius_km"))
    magnitude = data.get("magnitude")
    try:
        radius_km = int(radius) if radius is not None else None
        magnitude = float(magnitude) if magnitude is not None else None
    except (TypeError, ValueError):
        raise RequestError("Alert radius and magnitude must be numeric")

    if magnitude is not None and math.isnan(magnitude):
        raise RequestError("Alert magnitude must be a number")

    return Alert(
        id=str(data["id"]),
        title=str(data["title"]),
        description=str(data["description"]),
        severity=severity,
        type=alert_type,
        location=str(data["location"]),
        timestamp=_parse_timestamp(data["timestamp"]),
        source=str(data["source"]),
        coordinates=_parse_coordinates(data.get("coordinates")),
        languages=_parse_languages(data.get("languages")),
        magnitude=magnitude,
        zone=zone,
        radius_km=radius_km,
    )


def parse_recipients(data: Any) -> list[Recipient]:
    """Parse a recipient list, preserving submission order.

    Pure function. Empty strings are treated as absent addresses.

    Raises:
        RequestError: If the payload is not a list of objects
    """
    if not isinstance(data, list):
        raise RequestError("Recipients must be a list")

    recipients = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise RequestError(f"Recipient {i} must be an object")
        recipients.append(Recipient(
            phone=item.get("phone") or None,
            email=item.get("email") or None,
            language=item.get("language") or BASE_LANGUAGE,
        ))
    return recipients


def alert_to_dict(alert: Alert) -> dict[str, Any]:
    """Convert an Alert to the wire format.

    Pure function.
    """
    data: dict[str, Any] = {
        "id": alert.id,
        "title": alert.title,
        "description": alert.description,
        "severity": alert.severity,
        "type": alert.type,
        "location": alert.location,
        "timestamp": alert.timestamp.isoformat(),
        "source": alert.source,
    }

    if alert.coordinates is not None:
        data["coordinates"] = {"lat": alert.coordinates.lat, "lng": alert.coordinates.lng}
    if alert.magnitude is not None:
        data["magnitude"] = alert.magnitude
    if alert.zone is not None:
        data["zone"] = alert.zone
        data["radius"] = alert.radius_km
    if alert.languages:
        data["languages"] = {
            code: {"title": content.title, "description": content.description}
            for code, content in alert.languages.items()
        }

    return data
